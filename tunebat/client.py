"""Tunebat search client returning normalized search candidates."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

import requests

from config.settings import (
    TUNEBAT_BASE_URL,
    TUNEBAT_MAX_RETRY_AFTER_SECONDS,
    TUNEBAT_TIMEOUT_SECONDS,
    TUNEBAT_USER_AGENT,
)
from metadata.types import SearchCandidate

logger = logging.getLogger(__name__)


class TunebatError(RuntimeError):
    """A Tunebat request failed in a way that may succeed on retry."""


class TunebatRateLimited(TunebatError):
    """Tunebat throttled the request and said how long to wait."""

    def __init__(self, retry_after_seconds: float, message: str | None = None) -> None:
        self.retry_after_seconds = float(retry_after_seconds)
        super().__init__(message or f"Tunebat rate limited (retry after {self.retry_after_seconds:g}s)")


def parse_retry_after(value: Any) -> float | None:
    """Return the ``Retry-After`` delay in seconds, capped at ``TUNEBAT_MAX_RETRY_AFTER_SECONDS``.

    Absent, unparseable, negative or non-finite values return ``None``.
    """
    if value is None:
        return None
    try:
        seconds = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return min(seconds, TUNEBAT_MAX_RETRY_AFTER_SECONDS)


def parse_search_items(payload: Any) -> list[SearchCandidate]:
    """Map a Tunebat search payload onto ``SearchCandidate`` records in response order."""
    if not isinstance(payload, dict):
        raise TunebatError("Tunebat response is not a JSON object")
    data = payload.get("data") or {}
    items = data.get("items") if isinstance(data, dict) else None
    candidates: list[SearchCandidate] = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        name = item.get("n")
        if not isinstance(name, str) or not name.strip():
            continue
        candidates.append(
            SearchCandidate(
                name=name,
                bpm=item.get("b"),
                key_code=item.get("c"),
                duration_ms=item.get("d"),
                energy_percent=item.get("e"),
            )
        )
    return candidates


class TunebatClient:
    """Client for the Tunebat track search endpoint."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_sec: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url or TUNEBAT_BASE_URL
        self.timeout_sec = TUNEBAT_TIMEOUT_SECONDS if timeout_sec is None else timeout_sec
        self._session = session or requests.Session()

    def search_sync(self, query: str) -> list[SearchCandidate]:
        """Run one blocking search. Failures are raised as ``TunebatError`` subclasses."""
        try:
            response = self._session.get(
                self.base_url,
                params={"term": query},
                headers={"User-Agent": TUNEBAT_USER_AGENT},
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            raise TunebatError(f"Tunebat request failed: {exc}") from exc

        status = int(response.status_code)
        logger.debug("[TUNEBAT] request term=%r status=%s", query, status)
        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            if retry_after is not None:
                raise TunebatRateLimited(retry_after)
            raise TunebatError("Tunebat request failed (429 without Retry-After)")
        if status != 200:
            raise TunebatError(f"Tunebat request failed ({status})")

        try:
            payload = response.json()
        except ValueError as exc:
            raise TunebatError("Tunebat response is not valid JSON") from exc
        return parse_search_items(payload)

    async def search(self, query: str) -> list[SearchCandidate]:
        return await asyncio.to_thread(self.search_sync, query)
