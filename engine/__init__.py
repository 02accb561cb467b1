from .batch import build_result_row, chunk_tracks, format_duration, process_tracks_in_batches
from .fetcher import FetchAttemptState, TunebatFetcher, backoff_delay
from .search_scoring import dedupe_candidates, select_best_match, title_similarity

__all__ = [
    "FetchAttemptState",
    "TunebatFetcher",
    "backoff_delay",
    "build_result_row",
    "chunk_tracks",
    "dedupe_candidates",
    "format_duration",
    "process_tracks_in_batches",
    "select_best_match",
    "title_similarity",
]
