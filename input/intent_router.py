"""Intent routing helpers for Spotify links."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

_ID_RE = re.compile(r"^[A-Za-z0-9]+$")


class IntentType(Enum):
    SPOTIFY_PLAYLIST = "playlist"
    SPOTIFY_TRACK = "track"


@dataclass(frozen=True)
class Intent:
    type: IntentType
    identifier: str


def detect_intent(link: str) -> Intent:
    """Detect a Spotify playlist or track reference without network calls.

    Accepts ``https://open.spotify.com/{playlist,track}/<id>`` URLs (an
    ``intl-xx`` locale segment and any query string are ignored) and
    ``spotify:{playlist,track}:<id>`` URIs. Anything else raises ``ValueError``.
    """
    raw = (link or "").strip()
    if not raw:
        raise ValueError("A Spotify playlist or track link is required.")

    for intent_type in (IntentType.SPOTIFY_PLAYLIST, IntentType.SPOTIFY_TRACK):
        resource = intent_type.value
        if f"{resource}/" not in raw and f"spotify:{resource}:" not in raw:
            continue
        identifier = _extract_spotify_id(raw, resource)
        if not identifier:
            raise ValueError(f"Invalid {resource} link format.")
        return Intent(type=intent_type, identifier=identifier)

    raise ValueError("Unsupported link format. Provide a valid Spotify playlist or track link.")


def _extract_spotify_id(raw: str, resource: str) -> Optional[str]:
    if raw.startswith(f"spotify:{resource}:"):
        return _clean_identifier(raw.split(":", 2)[2])

    parsed = urlparse(raw if "://" in raw else f"https://{raw}")
    parts = [segment for segment in (parsed.path or "").split("/") if segment]
    if parts and parts[0].lower().startswith("intl-"):
        parts = parts[1:]
    if len(parts) >= 2 and parts[0].lower() == resource:
        return _clean_identifier(parts[1])
    return None


def _clean_identifier(value: str) -> Optional[str]:
    identifier = (value or "").split("?", 1)[0].strip().strip("/")
    if not _ID_RE.match(identifier):
        return None
    return identifier
