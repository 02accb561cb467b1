"""Structured types shared by the setlist enrichment pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from config.settings import UNAVAILABLE


@dataclass(frozen=True)
class Track:
    """A track as reported by the source catalog."""

    title: str
    artist: str


@dataclass(frozen=True)
class SearchCandidate:
    """A single Tunebat search hit."""

    name: str
    bpm: Any = None
    key_code: Any = None
    duration_ms: Any = None
    energy_percent: Any = None


@dataclass(frozen=True)
class Matched:
    candidate: SearchCandidate
    score: float


@dataclass(frozen=True)
class NoMatch:
    best_score: float = 0.0
    # One of "no_results", "low_confidence", "retries_exhausted".
    reason: str = "low_confidence"


MatchResult = Union[Matched, NoMatch]


@dataclass(frozen=True)
class ResultRow:
    """One report line. Fields Tunebat could not provide hold ``UNAVAILABLE``."""

    song: str
    artist: str
    bpm: Any = UNAVAILABLE
    key: Any = UNAVAILABLE
    duration: str = UNAVAILABLE
    energy: Any = UNAVAILABLE

    @property
    def is_available(self) -> bool:
        return any(value != UNAVAILABLE for value in (self.bpm, self.key, self.duration, self.energy))


# Row field -> report column header, in output order.
REPORT_COLUMNS = {
    "song": "Song",
    "artist": "Artist",
    "bpm": "BPM",
    "key": "Key",
    "duration": "Duration",
    "energy": "Energy",
}

__all__ = [
    "MatchResult",
    "Matched",
    "NoMatch",
    "REPORT_COLUMNS",
    "ResultRow",
    "SearchCandidate",
    "Track",
]
