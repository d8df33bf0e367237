from __future__ import annotations

import json
import threading
import time

import pytest

from crpt_client.core.domain.cancellation import CancelToken
from crpt_client.core.domain.errors import (
    AcquireTimeout,
    CancellationError,
    ConfigError,
    EncodingError,
    RequestFailed,
    TransportError,
)
from crpt_client.core.domain.models import Response
from crpt_client.core.services.throttled_invoker import ThrottledInvoker
from crpt_client.infra.json_encoder import JsonEncoder

URL = "http://example.com/api"


def _invoker(limiter, transport, encoder=None, **kwargs) -> ThrottledInvoker:
    return ThrottledInvoker(limiter, encoder or JsonEncoder(), transport, URL, **kwargs)


def test_invoke_posts_encoded_payload_with_signature(make_limiter, fake_transport):
    limiter = make_limiter(max_requests=10, window_seconds=1.0)
    invoker = _invoker(limiter, fake_transport)

    response = invoker.invoke({"doc_id": "doc123"}, "signature123")

    assert response.status_code == 200
    assert response.body == b"Success"
    assert len(fake_transport.calls) == 1
    url, headers, body = fake_transport.calls[0]
    assert url == URL
    assert headers["Content-Type"] == "application/json"
    assert headers["Signature"] == "signature123"
    assert json.loads(body) == {"doc_id": "doc123"}


def test_invoke_returns_non_2xx_response_unchanged(make_limiter, transport_factory):
    limiter = make_limiter(max_requests=1, window_seconds=1.0)
    resp = Response(status_code=400, body=b'{"error": "bad document"}')
    invoker = _invoker(limiter, transport_factory(response=resp))
    assert invoker.invoke({}, "s") is resp


def test_encoding_error_releases_permit_and_never_sends(make_limiter, fake_transport, failing_encoder):
    limiter = make_limiter(max_requests=2, window_seconds=60.0)
    invoker = _invoker(limiter, fake_transport, encoder=failing_encoder)
    before = limiter.available

    with pytest.raises(EncodingError):
        invoker.invoke({"bad": object()}, "sig")

    assert failing_encoder.calls == 1
    assert fake_transport.calls == []
    assert limiter.available == before


def test_unserializable_payload_raises_encoding_error(make_limiter, fake_transport):
    limiter = make_limiter(max_requests=2, window_seconds=60.0)
    invoker = _invoker(limiter, fake_transport)
    with pytest.raises(EncodingError):
        invoker.invoke({"bad": object()}, "sig")
    assert fake_transport.calls == []
    assert limiter.available == 2


def test_transport_error_is_wrapped_and_permit_released(make_limiter, transport_factory):
    limiter = make_limiter(max_requests=2, window_seconds=60.0)
    cause = TransportError("connection reset")
    transport = transport_factory(error=cause)
    invoker = _invoker(limiter, transport)

    with pytest.raises(RequestFailed) as exc_info:
        invoker.invoke({}, "sig")

    assert isinstance(exc_info.value, TransportError)
    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    assert len(transport.calls) == 1
    assert limiter.available == 2


def test_unexpected_transport_exception_still_releases_permit(make_limiter, transport_factory):
    limiter = make_limiter(max_requests=1, window_seconds=60.0)
    invoker = _invoker(limiter, transport_factory(error=KeyError("bug")))
    with pytest.raises(KeyError):
        invoker.invoke({}, "sig")
    assert limiter.available == 1


def test_each_outcome_nets_one_release(make_limiter, transport_factory, failing_encoder):
    limiter = make_limiter(max_requests=3, window_seconds=60.0)
    ok = _invoker(limiter, transport_factory())
    bad_encoding = _invoker(limiter, transport_factory(), encoder=failing_encoder)
    bad_transport = _invoker(limiter, transport_factory(error=TransportError("down")))

    ok.invoke({}, "s")
    assert limiter.available == 3
    with pytest.raises(EncodingError):
        bad_encoding.invoke({}, "s")
    assert limiter.available == 3
    with pytest.raises(RequestFailed):
        bad_transport.invoke({}, "s")
    assert limiter.available == 3
    assert limiter.window_remaining == 0


def test_cancelled_wait_sends_nothing(make_limiter, fake_transport):
    limiter = make_limiter(max_requests=1, window_seconds=60.0)
    invoker = _invoker(limiter, fake_transport)
    invoker.invoke({}, "first")

    token = CancelToken()
    errors: list[Exception] = []

    def worker() -> None:
        try:
            invoker.invoke({}, "second", cancel=token)
        except CancellationError as e:
            errors.append(e)

    t = threading.Thread(target=worker)
    t.start()
    time.sleep(0.05)
    token.cancel()
    t.join(1.0)

    assert len(errors) == 1
    assert len(fake_transport.calls) == 1
    assert limiter.available == 1


def test_acquire_timeout_option(make_limiter, fake_transport):
    limiter = make_limiter(max_requests=1, window_seconds=60.0)
    invoker = _invoker(limiter, fake_transport, acquire_timeout_seconds=0.05)
    invoker.invoke({}, "s")
    with pytest.raises(AcquireTimeout):
        invoker.invoke({}, "s")
    assert len(fake_transport.calls) == 1


@pytest.mark.parametrize("url, timeout", [("", None), (URL, -1.0)])
def test_invoker_validates_construction(make_limiter, fake_transport, url, timeout):
    limiter = make_limiter(max_requests=1, window_seconds=1.0)
    with pytest.raises(ConfigError):
        ThrottledInvoker(limiter, JsonEncoder(), fake_transport, url, acquire_timeout_seconds=timeout)


def test_five_concurrent_calls_with_capacity_two(make_limiter, fake_transport):
    start = time.monotonic()
    limiter = make_limiter(max_requests=2, window_seconds=0.1)
    invoker = _invoker(limiter, fake_transport)
    results: list[Response] = []
    lock = threading.Lock()

    def worker(i: int) -> None:
        r = invoker.invoke({"i": i}, "sig")
        with lock:
            results.append(r)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5.0)

    sent = sorted(ts - start for ts in fake_transport.sent_at)
    assert len(results) == 5
    assert all(r.status_code == 200 for r in results)
    assert len(sent) == 5
    assert sum(1 for s in sent if s < 0.08) == 2
    assert all(s >= 0.09 for s in sent[2:])
    assert limiter.available == 2
