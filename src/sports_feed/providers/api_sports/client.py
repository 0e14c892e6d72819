from __future__ import annotations

import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.errors import (
    ProviderRateLimited,
    ProviderResponseError,
    ProviderUnauthorized,
)


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class ApiSportsRateLimiter:
    """Proactive throttling based on API-Sports rate limit headers.

    The provider returns per-minute limit/remaining headers. Requests are paced
    to the plan limit, but an aggregation cycle cannot afford to sleep out a
    whole minute bucket: when the bucket is nearly empty we enter a cooldown
    and fail fast with ProviderRateLimited until it passes.
    """

    minute_limit_low_watermark: int = 2
    min_interval_s: float = 0.0
    max_pacing_sleep_s: float = 1.0
    last_request_monotonic: float | None = None
    cooldown_until_monotonic: float | None = None

    _sleep: Any = field(default=time.sleep, repr=False)
    _monotonic: Any = field(default=time.monotonic, repr=False)
    # Concurrent cycles share one limiter; pacing sleeps happen under the lock.
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def before_request(self) -> None:
        with self._lock:
            self._before_request_locked()

    def _before_request_locked(self) -> None:
        now = float(self._monotonic())
        if self.cooldown_until_monotonic is not None:
            if now < self.cooldown_until_monotonic:
                raise ProviderRateLimited(
                    f"api-sports cooldown active for {self.cooldown_until_monotonic - now:.1f}s"
                )
            self.cooldown_until_monotonic = None

        pause = 0.0
        if self.min_interval_s > 0.0 and self.last_request_monotonic is not None:
            remaining = self.min_interval_s - (now - self.last_request_monotonic)
            pause = min(max(remaining, 0.0), self.max_pacing_sleep_s)
        if pause > 0:
            self._sleep(pause)
        # Claim the slot now so a concurrent caller paces behind this request.
        self.last_request_monotonic = now + pause

    def after_response(self, headers: Mapping[str, str]) -> None:
        with self._lock:
            self._after_response_locked(headers)

    def _after_response_locked(self, headers: Mapping[str, str]) -> None:
        # Update pacing based on plan limit.
        limit = _parse_int(headers.get("X-RateLimit-Limit"))
        remaining = _parse_int(headers.get("X-RateLimit-Remaining"))

        if limit and limit > 0:
            self.min_interval_s = max(self.min_interval_s, 60.0 / float(limit))

        now = float(self._monotonic())
        # Close to exhausting the minute bucket (or another process is sharing
        # the same key): no reset header is guaranteed, so assume a full minute
        # when at/near zero.
        if remaining is not None and remaining <= self.minute_limit_low_watermark:
            cooldown = 60.0 if remaining <= 1 else 10.0
            self.cooldown_until_monotonic = now + cooldown

        self.last_request_monotonic = now


@dataclass
class ApiSportsClient:
    http: BaseHttpClient
    api_key: str
    rate_limiter: ApiSportsRateLimiter = field(default_factory=ApiSportsRateLimiter)

    def _headers(self) -> dict[str, str]:
        return {"x-apisports-key": self.api_key}

    def get(self, path: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        # Proactively pace requests based on most recently observed limit.
        self.rate_limiter.before_request()

        data, headers = self.http.get_json_with_headers(
            path, params=params, headers=self._headers()
        )
        self.rate_limiter.after_response(headers)

        # api-sports reports auth/plan problems with HTTP 200 and an `errors` body.
        errors = data.get("errors") or []
        if errors:
            text = str(errors)
            if "token" in text.lower() or "key" in text.lower():
                raise ProviderUnauthorized(f"api-sports rejected the key: {errors}")
            if "ratelimit" in text.lower() or "requests" in text.lower():
                raise ProviderRateLimited(f"api-sports quota: {errors}")
            raise ProviderResponseError(f"api-sports returned errors: {errors}")

        return data

    def get_response_items(
        self, path: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        payload = self.get(path, params=params)
        items = payload.get("response")
        if not isinstance(items, list):
            raise ProviderResponseError(f"Expected 'response' list, got: {type(items)}")
        return [i for i in items if isinstance(i, dict)]

    def close(self) -> None:
        self.http.close()
