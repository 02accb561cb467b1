"""Single-track Tunebat lookup with pacing, retries and rate-limit recovery."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from config.settings import (
    BACKOFF_FACTOR,
    BASE_DELAY_SECONDS,
    CONFIDENCE_FLOOR,
    MAX_ATTEMPTS,
    MAX_BACKOFF_SECONDS,
    MAX_JITTER_SECONDS,
)
from engine.search_scoring import select_best_match
from metadata.types import Matched, MatchResult, NoMatch
from tunebat.client import TunebatRateLimited

_LOG = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


def random_jitter() -> float:
    return random.uniform(0.0, MAX_JITTER_SECONDS)


def backoff_delay(attempt: int, error: BaseException) -> float:
    """Seconds to wait after ``attempt`` failed with ``error``.

    A server-provided retry-after wins over exponential backoff.
    """
    if isinstance(error, TunebatRateLimited):
        return error.retry_after_seconds + attempt
    return min(MAX_BACKOFF_SECONDS, BACKOFF_FACTOR ** attempt)


@dataclass(frozen=True)
class FetchAttemptState:
    attempt: int
    query: str

    def next(self) -> "FetchAttemptState":
        return FetchAttemptState(attempt=self.attempt + 1, query=self.query)


class TunebatFetcher:
    """Looks up one (artist, title) pair and returns the best Tunebat match.

    ``fetch`` never raises for service failures: once ``max_attempts`` queries
    have failed the lookup is abandoned and ``NoMatch`` is returned.
    """

    def __init__(
        self,
        search_service: Any,
        *,
        sleep: Sleep | None = None,
        jitter: Callable[[], float] | None = None,
        logger: logging.Logger | None = None,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY_SECONDS,
        confidence_floor: float = CONFIDENCE_FLOOR,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._search_service = search_service
        self._sleep = sleep or asyncio.sleep
        self._jitter = jitter or random_jitter
        self._log = logger or _LOG
        self.max_attempts = int(max_attempts)
        self.base_delay = float(base_delay)
        self.confidence_floor = float(confidence_floor)

    async def _pause(self, seconds: float) -> None:
        await self._sleep(max(0.0, seconds) + self._jitter())

    async def fetch(self, artist: str, title: str) -> MatchResult:
        state = FetchAttemptState(attempt=1, query=f"{artist} {title}")
        while True:
            self._log.info("[TUNEBAT] attempt %s: querying %r", state.attempt, state.query)
            await self._pause(self.base_delay)
            try:
                results = await self._search_service.search(state.query)
            except Exception as exc:
                self._log.warning(
                    '[TUNEBAT] attempt %s failed for "%s - %s": %s', state.attempt, artist, title, exc
                )
                if state.attempt >= self.max_attempts:
                    self._log.error(
                        '[TUNEBAT] exceeded %s attempts for "%s - %s", skipping',
                        self.max_attempts,
                        artist,
                        title,
                    )
                    return NoMatch(best_score=0.0, reason="retries_exhausted")
                delay = backoff_delay(state.attempt, exc)
                if isinstance(exc, TunebatRateLimited):
                    self._log.warning("[TUNEBAT] throttled, waiting %.1fs before retrying", delay)
                else:
                    self._log.warning("[TUNEBAT] retrying in %.1fs (exponential backoff)", delay)
                await self._pause(delay)
                state = state.next()
                continue

            self._log.info("[TUNEBAT] %s items returned for %r", len(results), state.query)
            result = select_best_match(
                results,
                title,
                confidence_floor=self.confidence_floor,
                log=self._log,
            )
            if isinstance(result, Matched):
                self._log.info(
                    '[TUNEBAT] best match for "%s - %s" is "%s" score=%.2f',
                    artist,
                    title,
                    result.candidate.name,
                    result.score,
                )
            else:
                self._log.warning(
                    '[TUNEBAT] no adequate match for "%s - %s" (best score %.2f)',
                    artist,
                    title,
                    result.best_score,
                )
            return result
