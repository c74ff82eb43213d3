"""Shared fixtures: a recording stand-in for requests.Session."""

import json

import pytest
import requests

WOO_ENV_VARS = (
    "WOOCOMMERCE_URL",
    "WOOCOMMERCE_CONSUMER_KEY",
    "WOOCOMMERCE_CONSUMER_SECRET",
    "WOOCOMMERCE_VERSION",
    "WOOCOMMERCE_WP_API",
    "WOOCOMMERCE_TIMEOUT",
    "WOOCOMMERCE_VERIFY_SSL",
    "WOOCOMMERCE_QUERY_STRING_AUTH",
    "WOOCOMMERCE_AUTH_MODE",
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json body")
        return self._payload


class RecordingSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse(200, {"ok": True})
        self.error = error
        self.calls = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in WOO_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def session():
    return RecordingSession()


@pytest.fixture
def failing_session():
    return RecordingSession(error=requests.ConnectionError("connection refused"))
