"""Application settings constants."""

from __future__ import annotations

import os

# Tunebat search endpoint and per-request timeout.
TUNEBAT_BASE_URL = os.getenv("TUNEBAT_BASE_URL", "https://api.tunebat.com/api/tracks/search")
TUNEBAT_TIMEOUT_SECONDS = float(os.getenv("TUNEBAT_TIMEOUT_SECONDS", "20"))
TUNEBAT_USER_AGENT = os.getenv("TUNEBAT_USER_AGENT", "SetlistEnricher/1.0")

# Upper bound on a server-requested Retry-After wait.
TUNEBAT_MAX_RETRY_AFTER_SECONDS = float(os.getenv("TUNEBAT_MAX_RETRY_AFTER_SECONDS", "60"))

# Tracks looked up concurrently per batch, and the pause between batches.
BATCH_SIZE = int(os.getenv("SETLIST_BATCH_SIZE", "5"))
BATCH_DELAY_SECONDS = float(os.getenv("SETLIST_BATCH_DELAY_SECONDS", "5.0"))

# Minimum title similarity for a Tunebat hit to be accepted.
CONFIDENCE_FLOOR = float(os.getenv("SETLIST_CONFIDENCE_FLOOR", "0.8"))

# Per-lookup retry policy.
MAX_ATTEMPTS = 5
BASE_DELAY_SECONDS = 0.5
MAX_JITTER_SECONDS = 0.5
BACKOFF_FACTOR = 1.5
MAX_BACKOFF_SECONDS = 5.0

# Value written in place of fields Tunebat could not provide.
UNAVAILABLE = "N/A"

DEFAULT_OUTPUT_PATH = "setlist.csv"
