from __future__ import annotations

from dataclasses import dataclass

from sports_feed.domain.enums import FetchErrorKind


class ProviderError(RuntimeError):
    """Base exception for provider-related failures."""


class ProviderRequestError(ProviderError):
    """HTTP/network/transport layer failures (timeouts, connection errors, non-2xx, etc.)."""

    kind: FetchErrorKind = FetchErrorKind.UNREACHABLE


class ProviderTimeout(ProviderRequestError):
    kind = FetchErrorKind.TIMEOUT


class ProviderUnreachable(ProviderRequestError):
    kind = FetchErrorKind.UNREACHABLE


class ProviderUnauthorized(ProviderRequestError):
    """Provider rejected our credentials (HTTP 401/403 or an auth error body)."""

    kind = FetchErrorKind.UNAUTHORIZED


class ProviderRateLimited(ProviderRequestError):
    """Provider throttled the request (e.g., HTTP 429)."""

    kind = FetchErrorKind.RATE_LIMITED


class ProviderResponseError(ProviderError):
    """Provider returned a response we cannot turn into a record list."""

    kind: FetchErrorKind = FetchErrorKind.MALFORMED_RESPONSE


class ProviderCapabilityError(ProviderError):
    """Adapter does not support a requested operation."""


@dataclass(frozen=True)
class ProviderMappingError(ProviderError):
    """Mapping/extraction of a single record failed due to unexpected schema or values."""
    message: str
    context: dict[str, object] | None = None

    def __str__(self) -> str:  # pragma: no cover
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"


@dataclass(frozen=True)
class FetchError:
    """Value (not exception) describing why an adapter produced no list at all."""

    provider_key: str
    kind: FetchErrorKind
    message: str

    @classmethod
    def from_exception(cls, provider_key: str, exc: ProviderError) -> FetchError:
        kind = getattr(exc, "kind", FetchErrorKind.MALFORMED_RESPONSE)
        return cls(provider_key=provider_key, kind=kind, message=str(exc))
