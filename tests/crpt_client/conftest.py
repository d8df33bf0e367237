"""tests/conftest.py

Common fixtures for the entire test suite.
"""

from __future__ import annotations

import json
import threading
import time
from typing import Mapping

import httpx
import pytest
from typer.testing import CliRunner

from crpt_client.core.domain.errors import EncodingError
from crpt_client.core.domain.models import RateLimitConfig, Response
from crpt_client.infra.rate_limiter import FixedWindowRateLimiter


class FakeTransport:
    """Records every send; optionally fails or sleeps before answering."""

    def __init__(
        self,
        response: Response | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.response = response or Response(status_code=200, body=b"Success")
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, dict[str, str], bytes]] = []
        self.sent_at: list[float] = []
        self._lock = threading.Lock()

    def send(self, url: str, headers: Mapping[str, str], body: bytes) -> Response:
        with self._lock:
            self.calls.append((url, dict(headers), body))
            self.sent_at.append(time.monotonic())
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


class FailingEncoder:
    def __init__(self) -> None:
        self.calls = 0

    def encode(self, payload) -> bytes:
        self.calls += 1
        raise EncodingError("malformed payload")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CRPT_* variables from the developer's shell out of the tests."""
    for name in (
        "CRPT_API_URL",
        "CRPT_REQUEST_LIMIT",
        "CRPT_TIME_INTERVAL_SECONDS",
        "CRPT_CONNECT_TIMEOUT_SECONDS",
        "CRPT_TIMEOUT_SECONDS",
        "CRPT_SHUTDOWN_GRACE_SECONDS",
        "CRPT_ACQUIRE_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def runner() -> CliRunner:
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def transport_factory():
    """Build FakeTransport instances with a custom response, error or delay."""
    return FakeTransport


@pytest.fixture
def failing_encoder() -> FailingEncoder:
    return FailingEncoder()


@pytest.fixture
def make_limiter():
    """Factory for FixedWindowRateLimiter instances that are shut down after the test."""
    created: list[FixedWindowRateLimiter] = []

    def _make(max_requests: int, window_seconds: float) -> FixedWindowRateLimiter:
        limiter = FixedWindowRateLimiter(
            RateLimitConfig(window_seconds=window_seconds, max_requests=max_requests),
            shutdown_grace_seconds=2.0,
        )
        created.append(limiter)
        return limiter

    yield _make
    for limiter in created:
        limiter.shutdown()


@pytest.fixture
def mock_httpx_client(monkeypatch):
    """
    Replaces httpx.Client with a mock that uses a MockTransport.

    Returns a handler function that tests can use to register mock responses.
    """
    responses = {}
    requests_log: list[httpx.Request] = []
    original_client = httpx.Client

    def add_response(
        url: str,
        method: str = "POST",
        status_code: int = 200,
        json_payload: dict | None = None,
        content: bytes | None = None,
        error: Exception | None = None,
    ):
        """Register a mock response (or a transport error) for a given URL and method."""
        if json_payload is not None:
            body = json.dumps(json_payload).encode("utf-8")
        else:
            body = content if content is not None else b""
        responses[(method.upper(), url)] = (status_code, body, error)

    def mock_transport(request: httpx.Request) -> httpx.Response:
        requests_log.append(request)
        key = (request.method, str(request.url))
        if key in responses:
            status, body, error = responses[key]
            if error is not None:
                raise error
            return httpx.Response(status, content=body, headers={"Content-Length": str(len(body))})
        return httpx.Response(404, text=f"Mock URL not found: {request.method} {request.url}")

    def patched_client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(mock_transport)
        return original_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "Client", patched_client)
    add_response.requests = requests_log  # type: ignore[attr-defined]
    return add_response

