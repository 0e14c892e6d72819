from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sports_feed.core.dates import parse_provider_datetime, utc_now
from sports_feed.domain.enums import EventStatusEnum, ProviderEnum, SportEnum
from sports_feed.domain.event import Score
from sports_feed.providers.api_sports.client import ApiSportsClient
from sports_feed.providers.base.adapter import (
    RecordMappingAdapter,
    dig,
    require_str,
    sports_for_query,
)
from sports_feed.providers.base.errors import ProviderMappingError
from sports_feed.providers.base.types import FetchQuery, Json, RawEvent


@dataclass(frozen=True)
class ApiSportsSport:
    """One API-Sports product (each lives on its own host)."""

    sport: SportEnum
    host: str
    path: str
    # Football (v3) nests ids/dates under "fixture", american-football under "game".
    envelope: str | None = None
    supports_live_param: bool = False


API_SPORTS_SPORTS: tuple[ApiSportsSport, ...] = (
    ApiSportsSport(SportEnum.FOOTBALL, "v3.football", "/fixtures", "fixture", True),
    ApiSportsSport(SportEnum.BASKETBALL, "v1.basketball", "/games"),
    ApiSportsSport(SportEnum.ICE_HOCKEY, "v1.hockey", "/games"),
    ApiSportsSport(SportEnum.BASEBALL, "v1.baseball", "/games"),
    ApiSportsSport(SportEnum.AMERICAN_FOOTBALL, "v1.american-football", "/games", "game"),
    ApiSportsSport(SportEnum.RUGBY, "v1.rugby", "/games"),
)

_SCHEDULED = {"NS", "TBD"}
_HALF_TIME = {"HT"}
_FINISHED = {"FT", "AET", "PEN", "AOT", "AP", "AW", "FINAL"}
_POSTPONED = {"PST", "PPD", "POST", "CANC", "CAN", "ABD", "SUSP", "AWD", "WO", "INTR"}


def map_api_sports_status(short: str | None) -> EventStatusEnum:
    if not short:
        raise ProviderMappingError("Missing status.short")

    s = short.upper()

    if s in _SCHEDULED:
        return EventStatusEnum.SCHEDULED
    if s in _HALF_TIME:
        return EventStatusEnum.HALF_TIME
    if s in _FINISHED:
        return EventStatusEnum.FINISHED
    if s in _POSTPONED:
        return EventStatusEnum.POSTPONED

    # 1H/2H/ET/P/BT/Q1..Q4/OT/P1..P3/IN1..IN9/LIVE ...
    return EventStatusEnum.IN_PROGRESS


def _score_side(value: Any) -> Any:
    # Team sports report {"total": n}; hockey/rugby report a bare int.
    if isinstance(value, dict):
        return value.get("total")
    return value


class ApiSportsAdapter(RecordMappingAdapter[ApiSportsSport]):
    """
    API-Sports multi-sport adapter (paid, most trusted).
    """

    provider_key = ProviderEnum.API_SPORTS.value
    trust_tier = 1

    def __init__(
        self,
        *,
        clients: Mapping[SportEnum, ApiSportsClient],
        sports: Sequence[ApiSportsSport] = API_SPORTS_SPORTS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(clock=clock)
        self._clients = dict(clients)
        self._sports = {s.sport: s for s in sports if s.sport in self._clients}

    def close(self) -> None:
        for client in self._clients.values():
            client.close()

    def _targets(self, query: FetchQuery) -> Sequence[ApiSportsSport]:
        return [self._sports[s] for s in sports_for_query(query, list(self._sports))]

    def _fetch_target(self, target: ApiSportsSport, query: FetchQuery) -> Iterable[Json]:
        client = self._clients[target.sport]
        if query.is_live and target.supports_live_param:
            params = {"live": "all"}
        else:
            params = {"date": self._clock().date().isoformat()}
        return client.get_response_items(target.path, params=params)

    def _map_item(self, item: Json, target: ApiSportsSport, *, fetched_at: datetime) -> RawEvent:
        core = item.get(target.envelope) if target.envelope else item
        if not isinstance(core, dict):
            raise ProviderMappingError(f"Missing '{target.envelope}' object")

        provider_id = require_str(core, "id", what="event id")
        home = require_str(item, "teams", "home", "name", what="home team")
        away = require_str(item, "teams", "away", "name", what="away team")

        status = map_api_sports_status(dig(core, "status", "short"))
        is_live = status in (EventStatusEnum.IN_PROGRESS, EventStatusEnum.HALF_TIME)

        date_value = core.get("date")
        if date_value is None:
            date_value = core.get("timestamp")
        try:
            start_time = parse_provider_datetime(date_value)
        except ValueError as e:
            raise ProviderMappingError(str(e), context={"id": provider_id}) from e

        if target.sport == SportEnum.FOOTBALL:
            raw_home, raw_away = dig(item, "goals", "home"), dig(item, "goals", "away")
        else:
            raw_home = _score_side(dig(item, "scores", "home"))
            raw_away = _score_side(dig(item, "scores", "away"))
        score = Score.parse(raw_home, raw_away) if raw_home is not None else None

        return RawEvent(
            provider_key=self.provider_key,
            # Each product numbers its games independently.
            provider_event_id=f"{target.sport.value}:{provider_id}",
            sport_label=target.host.split(".", 1)[1],
            league=str(dig(item, "league", "name") or ""),
            home=home,
            away=away,
            start_time=start_time,
            is_live=is_live,
            status=status,
            fetched_at=fetched_at,
            score=score,
        )
