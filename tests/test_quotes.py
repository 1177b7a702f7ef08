"""Tests for the quote client and endpoint."""
from __future__ import annotations

import random

import requests

from wellbeing_quiz.services.quotes import FALLBACK_QUOTES, QuoteClient


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False) -> None:
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response


def _client(session, url="https://quotes.example/random") -> QuoteClient:
    return QuoteClient(url, timeout=2.0, session=session, rng=random.Random(1))


def test_remote_quote_is_returned() -> None:
    session = FakeSession(FakeResponse({"content": "Breathe.", "author": "Someone"}))
    result = _client(session).fetch()
    assert result == {"quote": {"text": "Breathe.", "author": "Someone"}, "source": "remote"}
    assert session.calls == [("https://quotes.example/random", 2.0)]


def test_transport_error_falls_back() -> None:
    result = _client(FakeSession(error=requests.ConnectionError("refused"))).fetch()
    assert result["source"] == "fallback"
    assert result["quote"] in FALLBACK_QUOTES


def test_http_error_falls_back() -> None:
    result = _client(FakeSession(FakeResponse(status_code=503))).fetch()
    assert result["source"] == "fallback"
    assert result["quote"] in FALLBACK_QUOTES


def test_malformed_body_falls_back() -> None:
    for response in (FakeResponse(invalid_json=True), FakeResponse(["not", "a", "quote"]), FakeResponse({})):
        result = _client(FakeSession(response)).fetch()
        assert result["source"] == "fallback"


def test_missing_url_falls_back_without_request() -> None:
    session = FakeSession()
    result = _client(session, url=None).fetch()
    assert result["source"] == "fallback"
    assert session.calls == []


def test_fallback_does_not_share_list_entries() -> None:
    client = _client(FakeSession(), url=None)
    quote = client.fetch()["quote"]
    quote["text"] = "changed"
    assert all(q["text"] != "changed" for q in FALLBACK_QUOTES)


def test_quote_endpoint_uses_fallback(client) -> None:
    for _ in range(5):
        response = client.get("/api/quote")
        assert response.status_code == 200
        body = response.get_json()
        assert body["success"] is True
        assert body["source"] == "fallback"
        assert body["quote"] in FALLBACK_QUOTES


def test_quote_endpoint_uses_remote(app, client) -> None:
    session = FakeSession(FakeResponse({"content": "Keep going.", "author": "A. Person"}))
    app.extensions["quote_client"] = _client(session)
    body = client.get("/api/quote").get_json()
    assert body["source"] == "remote"
    assert body["quote"] == {"text": "Keep going.", "author": "A. Person"}
