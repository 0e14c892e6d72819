from __future__ import annotations

from typing import Any

import httpx
import pytest

from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.errors import (
    ProviderRequestError,
    ProviderTimeout,
    ProviderUnreachable,
)


def _client(handler: Any, retries: int = 1) -> BaseHttpClient:
    return BaseHttpClient(
        base_url="https://example.test/api",
        transport=httpx.MockTransport(handler),
        retries=retries,
        retry_wait_s=0.0,
    )


def test_connection_failure_is_retried_once() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise httpx.ConnectError("connection reset", request=request)
        return httpx.Response(200, json={"ok": True})

    assert _client(handler).get_json("/status") == {"ok": True}
    assert calls == 2


def test_persistent_timeout_gives_up_after_the_retry_budget() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ProviderTimeout):
        _client(handler, retries=2).get_json("/status")
    assert calls == 3


def test_http_errors_are_not_retried() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503)

    with pytest.raises(ProviderRequestError) as excinfo:
        _client(handler).get_json("/status")
    assert not isinstance(excinfo.value, ProviderUnreachable)
    assert calls == 1


def test_retries_stop_at_the_timeout_budget() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("refused", request=request)

    client = BaseHttpClient(
        base_url="https://example.test/api",
        transport=httpx.MockTransport(handler),
        timeout_s=0.05,
        retries=10,
        retry_wait_s=0.1,
    )
    with pytest.raises(ProviderUnreachable):
        client.get_json("/status")
    assert calls == 2
