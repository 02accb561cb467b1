from __future__ import annotations

import asyncio
from typing import Any

import pytest
import requests

from metadata.types import SearchCandidate
from tunebat.client import (
    TunebatClient,
    TunebatError,
    TunebatRateLimited,
    parse_retry_after,
    parse_search_items,
)


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, headers: dict | None = None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _FakeSession:
    def __init__(self, response=None, error: Exception | None = None):
        self.headers: dict[str, str] = {}
        self._response = response
        self._error = error
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if self._error is not None:
            raise self._error
        return self._response


_PAYLOAD = {
    "data": {
        "items": [
            {"id": "1", "n": "One More Time", "as": ["Daft Punk"], "b": 123, "c": "5B", "d": 320357, "e": 70},
            {"id": "2", "n": "", "b": 100},
            {"id": "3", "n": "One More Time - Radio Edit", "b": 122, "c": "5B", "d": 240000, "e": 68},
        ]
    }
}


def test_parse_search_items_maps_fields_and_skips_nameless() -> None:
    candidates = parse_search_items(_PAYLOAD)

    assert candidates == [
        SearchCandidate(name="One More Time", bpm=123, key_code="5B", duration_ms=320357, energy_percent=70),
        SearchCandidate(name="One More Time - Radio Edit", bpm=122, key_code="5B", duration_ms=240000, energy_percent=68),
    ]


def test_parse_search_items_handles_empty_data() -> None:
    assert parse_search_items({"data": {"items": []}}) == []
    assert parse_search_items({}) == []
    with pytest.raises(TunebatError):
        parse_search_items(["not", "a", "dict"])


@pytest.mark.parametrize(
    ("value", "expected"),
    [("2", 2.0), (" 5 ", 5.0), ("0", 0.0), (None, None), ("soon", None), ("-3", None), ("inf", None), ("nan", None), ("1e12", 60.0)],
)
def test_parse_retry_after(value, expected) -> None:
    assert parse_retry_after(value) == expected


def test_search_sends_term_and_returns_candidates() -> None:
    session = _FakeSession(_FakeResponse(200, _PAYLOAD))
    client = TunebatClient(base_url="https://tunebat.test/search", timeout_sec=3, session=session)

    candidates = asyncio.run(client.search("Daft Punk One More Time"))

    assert [c.name for c in candidates] == ["One More Time", "One More Time - Radio Edit"]
    assert session.calls == [
        {
            "url": "https://tunebat.test/search",
            "params": {"term": "Daft Punk One More Time"},
            "headers": {"User-Agent": "SetlistEnricher/1.0"},
            "timeout": 3,
        }
    ]


def test_search_429_with_retry_after_is_rate_limited() -> None:
    session = _FakeSession(_FakeResponse(429, headers={"Retry-After": "2"}))
    client = TunebatClient(session=session)

    with pytest.raises(TunebatRateLimited) as excinfo:
        client.search_sync("query")

    assert excinfo.value.retry_after_seconds == 2.0


def test_search_429_without_retry_after_is_generic() -> None:
    session = _FakeSession(_FakeResponse(429))
    client = TunebatClient(session=session)

    with pytest.raises(TunebatError) as excinfo:
        client.search_sync("query")

    assert not isinstance(excinfo.value, TunebatRateLimited)


def test_search_server_error_is_generic() -> None:
    client = TunebatClient(session=_FakeSession(_FakeResponse(503)))

    with pytest.raises(TunebatError, match="503"):
        client.search_sync("query")


def test_search_transport_error_is_wrapped() -> None:
    client = TunebatClient(session=_FakeSession(error=requests.ConnectionError("reset")))

    with pytest.raises(TunebatError):
        client.search_sync("query")


def test_search_invalid_json_is_generic() -> None:
    client = TunebatClient(session=_FakeSession(_FakeResponse(200, ValueError("bad json"))))

    with pytest.raises(TunebatError, match="JSON"):
        client.search_sync("query")


def test_search_sends_user_agent_through_real_session(monkeypatch) -> None:
    session = requests.Session()
    sent = []

    def fake_send(request, **kwargs):
        sent.append(request)
        response = requests.Response()
        response.status_code = 200
        response._content = b'{"data": {"items": []}}'
        response.request = request
        return response

    monkeypatch.setattr(session, "send", fake_send)
    client = TunebatClient(base_url="https://tunebat.test/search", session=session)

    assert client.search_sync("query") == []
    assert sent[0].headers["User-Agent"] == "SetlistEnricher/1.0"


def test_search_429_with_huge_retry_after_is_capped() -> None:
    session = _FakeSession(_FakeResponse(429, headers={"Retry-After": "1e12"}))
    client = TunebatClient(session=session)

    with pytest.raises(TunebatRateLimited) as excinfo:
        client.search_sync("query")

    assert excinfo.value.retry_after_seconds == 60.0


def test_search_429_with_infinite_retry_after_is_generic() -> None:
    session = _FakeSession(_FakeResponse(429, headers={"Retry-After": "inf"}))
    client = TunebatClient(session=session)

    with pytest.raises(TunebatError) as excinfo:
        client.search_sync("query")

    assert not isinstance(excinfo.value, TunebatRateLimited)
