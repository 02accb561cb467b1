"""Report export helpers."""
