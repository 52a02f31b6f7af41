# -*- coding: utf-8 -*-
import pytest

from httpx import HTTPStatusError, Request, Response, TimeoutException

from app.shared.core.http_retry_utils import (
    jittered_delay,
    next_delay,
    retry_with_backoff,
    with_retry,
)


@pytest.mark.asyncio
async def test_retry_success_without_retries(recorded_sleeps):
    async def _ok(url, **kwargs):
        return Response(200, request=Request("GET", url))

    r = await retry_with_backoff(_ok, "https://x.test", sleep=recorded_sleeps)
    assert r.status_code == 200
    assert recorded_sleeps.delays == []


@pytest.mark.asyncio
async def test_retry_on_http_status_then_success(recorded_sleeps):
    calls = {"n": 0}

    async def _sometimes(url, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            return Response(503, request=Request("POST", url))
        return Response(200, request=Request("POST", url))

    r = await retry_with_backoff(
        _sometimes, "https://x.test", max_retries=2, base_delay=0.5, sleep=recorded_sleeps
    )
    assert r.status_code == 200
    assert calls["n"] == 2
    assert len(recorded_sleeps.delays) == 1
    # jitter de hasta 20%
    assert 0.5 <= recorded_sleeps.delays[0] <= 0.6


@pytest.mark.asyncio
async def test_retry_on_transport_error_then_success(recorded_sleeps):
    calls = {"n": 0}

    async def _flaky(url, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise TimeoutException("boom")
        return Response(200, request=Request("GET", url))

    r = await retry_with_backoff(_flaky, "https://x.test", max_retries=2, sleep=recorded_sleeps)
    assert r.status_code == 200
    assert calls["n"] == 2


@pytest.mark.asyncio
async def test_retry_exhausted_on_status_raises(recorded_sleeps):
    calls = {"n": 0}

    async def _always_500(url, **kwargs):
        calls["n"] += 1
        return Response(500, request=Request("POST", url))

    with pytest.raises(HTTPStatusError):
        await retry_with_backoff(
            _always_500, "https://x.test", max_retries=2, base_delay=1.0, sleep=recorded_sleeps
        )
    assert calls["n"] == 3
    # backoff exponencial: 1s, 2s (+ jitter)
    assert len(recorded_sleeps.delays) == 2
    assert 1.0 <= recorded_sleeps.delays[0] <= 1.2
    assert 2.0 <= recorded_sleeps.delays[1] <= 2.4


@pytest.mark.asyncio
async def test_retry_exhausted_on_transport_error_reraises(recorded_sleeps):
    async def _down(url, **kwargs):
        raise TimeoutException("down")

    with pytest.raises(TimeoutException):
        await retry_with_backoff(_down, "https://x.test", max_retries=1, sleep=recorded_sleeps)
    assert len(recorded_sleeps.delays) == 1


@pytest.mark.asyncio
async def test_client_error_is_not_retried(recorded_sleeps):
    calls = {"n": 0}

    async def _bad_request(url, **kwargs):
        calls["n"] += 1
        return Response(400, request=Request("POST", url))

    r = await retry_with_backoff(_bad_request, "https://x.test", max_retries=3, sleep=recorded_sleeps)
    assert r.status_code == 400
    assert calls["n"] == 1
    assert recorded_sleeps.delays == []


@pytest.mark.asyncio
async def test_retry_with_backoff_param_validation():
    async def _never(*args, **kwargs):
        raise AssertionError("no debe llamarse")

    with pytest.raises(ValueError):
        await retry_with_backoff(_never, max_retries=-1)
    with pytest.raises(ValueError):
        await retry_with_backoff(_never, base_delay=0.0)


@pytest.mark.asyncio
async def test_with_retry_decorator_passes_arguments():
    seen = {}

    @with_retry(max_retries=1, base_delay=0.01)
    async def _post(url, *, content=None):
        seen["content"] = content
        return Response(201, request=Request("POST", url))

    r = await _post("https://x.test", content=b"pdf")
    assert r.status_code == 201
    assert seen["content"] == b"pdf"


def test_delay_helpers():
    assert next_delay(1.0, 2.0, 8.0) == 2.0
    assert next_delay(8.0, 2.0, 8.0) == 8.0
    for _ in range(20):
        assert 1.0 <= jittered_delay(1.0) <= 1.2
# Fin del archivo
