from .types import REPORT_COLUMNS, Matched, MatchResult, NoMatch, ResultRow, SearchCandidate, Track

__all__ = ["REPORT_COLUMNS", "MatchResult", "Matched", "NoMatch", "ResultRow", "SearchCandidate", "Track"]
