from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from sports_feed.core.logging import safe_url

from .errors import (
    ProviderRateLimited,
    ProviderRequestError,
    ProviderResponseError,
    ProviderTimeout,
    ProviderUnauthorized,
    ProviderUnreachable,
)

logger = logging.getLogger(__name__)

Json = dict[str, Any]


@dataclass
class BaseHttpClient:
    """
    Provider-agnostic HTTP client wrapper.

    - Uses a single underlying httpx.Client for connection pooling.
    - Maps transport problems onto the provider error hierarchy so adapters can
      report a FetchErrorKind (timeout / unauthorized / rate limited / unreachable / malformed).
    - Provider-specific clients can subclass and add convenience methods / auth.
    """

    base_url: str
    timeout_s: float = 6.0
    connect_timeout_s: float = 3.0
    headers: Mapping[str, str] = field(default_factory=dict)
    # Extra attempts after a timeout or connection failure, all within timeout_s.
    retries: int = 1
    retry_wait_s: float = 0.2

    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        self._client = httpx.Client(
            base_url=self.base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(
                self.timeout_s, connect=min(self.connect_timeout_s, self.timeout_s)
            ),
            headers=dict(self.headers),
            transport=self.transport,
            follow_redirects=True,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BaseHttpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """
        Perform an HTTP request and return the 2xx response.
        Raises a ProviderRequestError subclass on transport issues / non-2xx.

        Timeouts and connection failures are retried with exponential backoff,
        but never past `timeout_s` from the first attempt.
        """
        retrying = Retrying(
            retry=retry_if_exception_type((ProviderTimeout, ProviderUnreachable)),
            stop=stop_after_attempt(1 + self.retries) | stop_after_delay(self.timeout_s),
            wait=wait_exponential(multiplier=self.retry_wait_s, max=1.0),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                resp = self._send(method, path, params=params, headers=headers)
        return resp

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
    ) -> httpx.Response:
        try:
            resp = self._client.request(
                method=method,
                url=path.lstrip("/"),
                params=params,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeout(f"Timed out: {method} {path.split('?')[0]}") from e
        except httpx.TransportError as e:
            raise ProviderUnreachable(f"{type(e).__name__}: {e}") from e

        url = safe_url(resp.request.url)
        logger.debug("HTTP %s %s -> %d", method, url, resp.status_code)

        if resp.status_code in (401, 403):
            raise ProviderUnauthorized(f"HTTP {resp.status_code} for {method} {url}")

        if resp.status_code == 429:
            raise ProviderRateLimited("Provider rate limited the request (HTTP 429).")

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderRequestError(f"HTTP {resp.status_code} for {method} {url}") from e

        return resp

    def get_json_value(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """GET and return parsed JSON of any shape."""
        resp = self.request("GET", path, params=params, headers=headers)
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderResponseError("Response was not valid JSON.") from e

    def get_json(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Json:
        data = self.get_json_value(path, params=params, headers=headers)
        if not isinstance(data, dict):
            raise ProviderResponseError(f"Expected JSON object, got {type(data)}")
        return data

    def get_json_with_headers(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[Json, Mapping[str, str]]:
        resp = self.request("GET", path, params=params, headers=headers)
        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderResponseError("Response was not valid JSON.") from e
        if not isinstance(data, dict):
            raise ProviderResponseError(f"Expected JSON object, got {type(data)}")
        return data, resp.headers
