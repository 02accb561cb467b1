"""Spotify API client used as the track source for setlist enrichment."""

from __future__ import annotations

import base64
import logging
import os
import time
import urllib.parse
from typing import Any

import requests

from input.intent_router import Intent, IntentType
from metadata.types import Track

logger = logging.getLogger(__name__)


class SpotifyClient:
    """Client for reading single tracks and playlist tracks from Spotify."""

    _TOKEN_URL = "https://accounts.spotify.com/api/token"
    _TRACK_URL = "https://api.spotify.com/v1/tracks/{track_id}"
    _PLAYLIST_TRACKS_URL = "https://api.spotify.com/v1/playlists/{playlist_id}/tracks"

    def __init__(
        self,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        access_token: str | None = None,
        timeout_sec: int = 20,
    ) -> None:
        self.client_id = client_id or os.environ.get("SPOTIFY_CLIENT_ID")
        self.client_secret = client_secret or os.environ.get("SPOTIFY_CLIENT_SECRET")
        self.timeout_sec = timeout_sec
        self._provided_access_token = (access_token or "").strip() or None
        self._access_token: str | None = None
        self._access_token_expire_at: float = 0.0

    def _get_access_token(self) -> str:
        if self._provided_access_token:
            return self._provided_access_token

        if not self.client_id or not self.client_secret:
            raise RuntimeError("Spotify credentials are required (SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET)")

        now = time.time()
        if self._access_token and now < self._access_token_expire_at:
            return self._access_token

        auth_payload = f"{self.client_id}:{self.client_secret}".encode("utf-8")
        auth_header = base64.b64encode(auth_payload).decode("ascii")
        response = requests.post(
            self._TOKEN_URL,
            data={"grant_type": "client_credentials"},
            headers={"Authorization": f"Basic {auth_header}"},
            timeout=self.timeout_sec,
        )
        if response.status_code != 200:
            raise RuntimeError(f"Spotify token request failed ({response.status_code})")

        payload = response.json()
        token = payload.get("access_token")
        if not token:
            raise RuntimeError("Spotify token response missing access_token")

        expires_in = int(payload.get("expires_in") or 0)
        self._access_token = token
        self._access_token_expire_at = now + max(0, expires_in - 30)
        logger.info("[SPOTIFY] access token retrieved")
        return token

    def authenticate(self) -> None:
        """Fetch an access token up front so credential problems surface early."""
        self._get_access_token()

    def _request_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        token = self._get_access_token()
        headers = {"Authorization": f"Bearer {token}"}
        response = requests.get(url, params=params, headers=headers, timeout=self.timeout_sec)
        if response.status_code == 401 and not self._provided_access_token:
            self._access_token = None
            token = self._get_access_token()
            headers = {"Authorization": f"Bearer {token}"}
            response = requests.get(url, params=params, headers=headers, timeout=self.timeout_sec)
        if response.status_code != 200:
            raise RuntimeError(f"Spotify request failed ({response.status_code})")
        return response.json()

    def get_track(self, track_id: str) -> Track | None:
        """Fetch one track; returns ``None`` when the payload has no usable name."""
        track_id = (track_id or "").strip()
        if not track_id:
            raise ValueError("track_id is required")

        logger.info("[SPOTIFY] retrieving details for track id=%s", track_id)
        encoded_id = urllib.parse.quote(track_id, safe="")
        payload = self._request_json(self._TRACK_URL.format(track_id=encoded_id))
        track = _to_track(payload)
        if track is not None:
            logger.info("[SPOTIFY] retrieved track: %s by %s", track.title, track.artist)
        return track

    def get_playlist_tracks(self, playlist_id: str) -> list[Track]:
        """Fetch every playlist track in playlist order, following ``next`` pages."""
        playlist_id = (playlist_id or "").strip()
        if not playlist_id:
            raise ValueError("playlist_id is required")

        logger.info("[SPOTIFY] retrieving tracks for playlist id=%s", playlist_id)
        encoded_id = urllib.parse.quote(playlist_id, safe="")
        page = self._request_json(
            self._PLAYLIST_TRACKS_URL.format(playlist_id=encoded_id),
            params={"fields": "items(track(name,artists(name))),next", "limit": 100},
        )

        tracks: list[Track] = []
        while True:
            for raw in page.get("items") or []:
                track = _to_track((raw or {}).get("track"))
                if track is not None:
                    tracks.append(track)

            next_url = page.get("next")
            if not next_url:
                break
            page = self._request_json(str(next_url))

        logger.info("[SPOTIFY] found %s tracks in playlist id=%s", len(tracks), playlist_id)
        return tracks


def _to_track(payload: Any) -> Track | None:
    if not isinstance(payload, dict):
        return None
    title = payload.get("name")
    if not isinstance(title, str) or not title.strip():
        return None
    artists = payload.get("artists") or []
    first_artist = artists[0].get("name") if artists and isinstance(artists[0], dict) else None
    return Track(title=title, artist=str(first_artist or ""))


def load_tracks(client: SpotifyClient, intent: Intent) -> list[Track]:
    """Return the tracks referenced by ``intent``.

    Request failures are logged and yield an empty list; no retries are made here.
    """
    try:
        if intent.type is IntentType.SPOTIFY_TRACK:
            track = client.get_track(intent.identifier)
            return [track] if track is not None else []
        if intent.type is IntentType.SPOTIFY_PLAYLIST:
            return client.get_playlist_tracks(intent.identifier)
    except (RuntimeError, requests.RequestException) as exc:
        logger.error("[SPOTIFY] error retrieving %s %s: %s", intent.type.value, intent.identifier, exc)
        return []
    raise ValueError(f"Unsupported intent type: {intent.type}")
