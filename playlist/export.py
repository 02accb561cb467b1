"""Setlist report export helpers."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from metadata.types import REPORT_COLUMNS, ResultRow


def write_setlist_csv(rows: Iterable[ResultRow], path: Path | str) -> Path:
    """Create or overwrite a CSV setlist report.

    Rules:
    - Header is ``Song, Artist, BPM, Key, Duration, Energy``.
    - One line per row, in the order given.
    - Parent directories are created.
    - Writes are atomic (temp file then replace).
    """
    target_path = Path(path)
    target_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = target_path.with_name(f".{target_path.name}.tmp")

    fields = list(REPORT_COLUMNS)
    try:
        with temp_path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(REPORT_COLUMNS[field] for field in fields)
            for row in rows:
                writer.writerow(getattr(row, field) for field in fields)
        temp_path.replace(target_path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise
    return target_path
