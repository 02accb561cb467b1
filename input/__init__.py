"""Input parsing helpers."""
