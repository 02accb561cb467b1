"""Batched enrichment of a track list into report rows."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Callable, Sequence

from config.settings import BATCH_DELAY_SECONDS, BATCH_SIZE, UNAVAILABLE
from engine.fetcher import Sleep, random_jitter
from metadata.types import Matched, MatchResult, ResultRow, Track

_LOG = logging.getLogger(__name__)


def format_duration(ms: Any) -> str:
    """Format milliseconds as ``M:SS``; anything non-numeric becomes ``UNAVAILABLE``."""
    if ms is None or isinstance(ms, bool):
        return UNAVAILABLE
    try:
        value = float(ms)
    except (TypeError, ValueError):
        return UNAVAILABLE
    if math.isnan(value) or math.isinf(value) or value < 0:
        return UNAVAILABLE
    minutes = int(value // 60000)
    seconds = int((value % 60000) // 1000)
    return f"{minutes}:{seconds:02d}"


def _field(value: Any) -> Any:
    return UNAVAILABLE if value is None else value


def build_result_row(track: Track, result: MatchResult) -> ResultRow:
    if isinstance(result, Matched):
        candidate = result.candidate
        return ResultRow(
            song=track.title,
            artist=track.artist,
            bpm=_field(candidate.bpm),
            key=_field(candidate.key_code),
            duration=format_duration(candidate.duration_ms),
            energy=_field(candidate.energy_percent),
        )
    return ResultRow(song=track.title, artist=track.artist)


def chunk_tracks(tracks: Sequence[Track], batch_size: int) -> list[list[Track]]:
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    return [list(tracks[i:i + batch_size]) for i in range(0, len(tracks), batch_size)]


async def _enrich_track(fetcher: Any, track: Track, log: logging.Logger) -> ResultRow:
    log.info("[BATCH] processing track: %s - %s", track.artist, track.title)
    result = await fetcher.fetch(track.artist, track.title)
    row = build_result_row(track, result)
    if row.is_available:
        log.info(
            '[BATCH] tunebat data for "%s - %s": BPM=%s Key=%s Duration=%s Energy=%s',
            track.artist,
            track.title,
            row.bpm,
            row.key,
            row.duration,
            row.energy,
        )
    else:
        log.warning("[BATCH] no tunebat data for: %s - %s", track.artist, track.title)
    return row


async def process_tracks_in_batches(
    tracks: Sequence[Track],
    fetcher: Any,
    *,
    batch_size: int = BATCH_SIZE,
    batch_delay: float = BATCH_DELAY_SECONDS,
    sleep: Sleep | None = None,
    jitter: Callable[[], float] | None = None,
    logger: logging.Logger | None = None,
) -> list[ResultRow]:
    """Enrich ``tracks`` batch by batch and return one row per track in input order.

    Tracks inside a batch are looked up concurrently; batches run one after
    another with a ``batch_delay`` pause between them (none after the last).
    """
    sleep = sleep or asyncio.sleep
    jitter = jitter or random_jitter
    log = logger or _LOG
    batches = chunk_tracks(tracks, batch_size)
    rows: list[ResultRow] = []
    for index, batch in enumerate(batches, start=1):
        log.info("[BATCH] === processing batch %s of %s ===", index, len(batches))
        batch_rows = await asyncio.gather(*(_enrich_track(fetcher, track, log) for track in batch))
        rows.extend(batch_rows)
        if index < len(batches):
            log.info("[BATCH] batch complete, waiting %.1fs before next batch", batch_delay)
            await sleep(max(0.0, batch_delay) + jitter())
    return rows
