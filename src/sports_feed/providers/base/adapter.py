from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

from sports_feed.core.dates import utc_now
from sports_feed.domain.enums import EventStatusEnum, SportEnum
from sports_feed.domain.event import EventValidationError

from .errors import FetchError, ProviderError, ProviderMappingError
from .types import DroppedRecord, FetchQuery, FetchResult, Json, RawEvent

logger = logging.getLogger(__name__)

TargetT = TypeVar("TargetT")


class SourceAdapter(Protocol):
    """
    The cascade depends on this, not on any HTTP client.

    `fetch` must not raise for fetch-level problems: failures come back as
    `FetchResult.error`, "no data" as an empty list.
    """

    provider_key: str
    trust_tier: int

    def fetch(self, query: FetchQuery) -> FetchResult:
        ...


class RecordMappingAdapter(ABC, Generic[TargetT]):
    """
    Shared fetch loop for HTTP-backed adapters.

    Subclasses say which endpoints ("targets") to hit for a query, how to pull
    raw records from one target, and how to map one record. Records that fail
    mapping are dropped one by one; a target that fails is skipped, and only
    when every target fails does the adapter report a FetchError.
    """

    provider_key: str
    trust_tier: int

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    @abstractmethod
    def _targets(self, query: FetchQuery) -> Sequence[TargetT]:
        ...

    @abstractmethod
    def _fetch_target(self, target: TargetT, query: FetchQuery) -> Iterable[Json]:
        ...

    @abstractmethod
    def _map_item(self, item: Json, target: TargetT, *, fetched_at: datetime) -> RawEvent | None:
        """Map one record; None skips it, ProviderMappingError drops it."""
        ...

    def close(self) -> None:
        pass

    def fetch(self, query: FetchQuery) -> FetchResult:
        targets = list(self._targets(query))
        if not targets:
            return FetchResult(provider_key=self.provider_key)

        fetched_at = self._clock()
        events: list[RawEvent] = []
        dropped: list[DroppedRecord] = []
        errors: list[FetchError] = []

        for target in targets:
            try:
                items = list(self._fetch_target(target, query))
            except ProviderError as exc:
                errors.append(FetchError.from_exception(self.provider_key, exc))
                continue

            for item in items:
                try:
                    raw = self._map_item(item, target, fetched_at=fetched_at)
                except ProviderMappingError as exc:
                    dropped.append(DroppedRecord(reason=exc.message, context=exc.context))
                    continue
                except (
                    EventValidationError,
                    ArithmeticError,
                    KeyError,
                    TypeError,
                    ValueError,
                ) as exc:
                    reason = f"{type(exc).__name__}: {exc}"
                    dropped.append(DroppedRecord(reason=reason, context=_item_ref(item)))
                    continue

                if raw is not None and _matches(raw, query):
                    events.append(raw)

        if dropped:
            logger.debug(
                "%s dropped %d malformed record(s) for %s",
                self.provider_key,
                len(dropped),
                query.describe(),
            )

        if errors and len(errors) == len(targets):
            # Nothing at all came back; report the first failure.
            return FetchResult(provider_key=self.provider_key, dropped=dropped, error=errors[0])

        for err in errors:
            logger.warning(
                "%s partial failure for %s: kind=%s %s",
                self.provider_key,
                query.describe(),
                err.kind.value,
                err.message,
            )

        return FetchResult(provider_key=self.provider_key, events=events, dropped=dropped)


def _matches(raw: RawEvent, query: FetchQuery) -> bool:
    if query.is_live is None:
        return True
    if query.is_live:
        return raw.is_live
    # Upcoming means not started yet.
    return not raw.is_live and raw.status != EventStatusEnum.FINISHED


def _item_ref(item: Any) -> dict[str, object] | None:
    if isinstance(item, dict):
        for key in ("id", "idEvent", "fixture"):
            if key in item:
                return {key: item[key]}
    return None


def require_str(item: Json, *keys: str, what: str) -> str:
    """Walk nested dict keys and return a non-empty string or raise ProviderMappingError."""

    value: Any = item
    for key in keys:
        if not isinstance(value, dict):
            value = None
            break
        value = value.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ProviderMappingError(f"Missing {what}", context={"path": ".".join(keys)})
    return value.strip()


def dig(item: Any, *keys: str | int) -> Any:
    """Nested get that tolerates missing keys and wrong container types."""

    value = item
    for key in keys:
        if isinstance(key, int):
            if not isinstance(value, list) or len(value) <= key:
                return None
            value = value[key]
        else:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
    return value


def sports_for_query(query: FetchQuery, supported: Sequence[SportEnum]) -> list[SportEnum]:
    if query.sport is None:
        return list(supported)
    return [query.sport] if query.sport in supported else []
