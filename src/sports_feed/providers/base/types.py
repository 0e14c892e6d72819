from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sports_feed.domain.enums import EventStatusEnum, SportEnum
from sports_feed.domain.event import Odds, Score
from sports_feed.providers.base.errors import FetchError

Json = dict[str, Any]


@dataclass(frozen=True)
class FetchQuery:
    """
    Standardized request used by the cascade.
    `None` means "all" for both filters.
    """
    sport: SportEnum | None = None
    is_live: bool | None = None

    def describe(self) -> str:
        sport = self.sport.value if self.sport is not None else "all"
        live = "all" if self.is_live is None else ("live" if self.is_live else "upcoming")
        return f"sport={sport} live={live}"


@dataclass(frozen=True)
class RawEvent:
    """
    One provider record mapped into the canonical shape, sport still unclassified.
    """
    provider_key: str
    provider_event_id: str
    sport_label: str | int | None
    league: str
    home: str
    away: str
    start_time: datetime
    is_live: bool
    status: EventStatusEnum
    fetched_at: datetime
    score: Score | None = None
    odds: Odds | None = None


@dataclass(frozen=True)
class DroppedRecord:
    reason: str
    context: dict[str, object] | None = None


@dataclass(frozen=True)
class FetchResult:
    provider_key: str
    events: list[RawEvent] = field(default_factory=list)
    dropped: list[DroppedRecord] = field(default_factory=list)
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
