from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from sports_feed.core.dates import parse_provider_datetime, utc_now
from sports_feed.domain.enums import EventStatusEnum, ProviderEnum, SportEnum
from sports_feed.domain.event import Score
from sports_feed.providers.base.adapter import RecordMappingAdapter, require_str
from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.errors import ProviderMappingError, ProviderResponseError
from sports_feed.providers.base.types import FetchQuery, Json, RawEvent


@dataclass(frozen=True)
class SportsDbSport:
    sport: SportEnum
    name: str
    primary: bool = False


SPORTSDB_SPORTS: tuple[SportsDbSport, ...] = (
    SportsDbSport(SportEnum.FOOTBALL, "Soccer", primary=True),
    SportsDbSport(SportEnum.BASKETBALL, "Basketball", primary=True),
    SportsDbSport(SportEnum.ICE_HOCKEY, "Ice Hockey", primary=True),
    SportsDbSport(SportEnum.BASEBALL, "Baseball", primary=True),
    SportsDbSport(SportEnum.AMERICAN_FOOTBALL, "American Football", primary=True),
    SportsDbSport(SportEnum.RUGBY, "Rugby"),
    SportsDbSport(SportEnum.CRICKET, "Cricket"),
    SportsDbSport(SportEnum.TENNIS, "Tennis"),
    SportsDbSport(SportEnum.MMA, "Fighting"),
)

_SCHEDULED = {"NS", "NOT STARTED", "TBD", "SCHEDULED"}
_HALF_TIME = {"HT", "HALFTIME", "HALF TIME", "BREAK"}
_FINISHED = {"FT", "AET", "PEN", "AOT", "AP", "FINAL", "FINISHED", "MATCH FINISHED"}
_POSTPONED = {
    "PST",
    "POSTPONED",
    "CANC",
    "CANCELLED",
    "CANCELED",
    "ABD",
    "ABANDONED",
    "SUSP",
    "SUSPENDED",
}


def map_sportsdb_status(
    value: object, *, start_time: datetime, fetched_at: datetime
) -> EventStatusEnum:
    s = value.strip().upper() if isinstance(value, str) else ""

    if not s:
        # Free-tier rows often carry no status at all.
        if start_time > fetched_at:
            return EventStatusEnum.SCHEDULED
        raise ProviderMappingError("Missing status for an event that should have started")

    if s in _SCHEDULED:
        return EventStatusEnum.SCHEDULED
    if s in _HALF_TIME:
        return EventStatusEnum.HALF_TIME
    if s in _FINISHED:
        return EventStatusEnum.FINISHED
    if s in _POSTPONED:
        return EventStatusEnum.POSTPONED
    return EventStatusEnum.IN_PROGRESS


class TheSportsDbAdapter(RecordMappingAdapter[SportsDbSport]):
    """
    TheSportsDB v1 (free key by default): day schedules and livescores.
    """

    provider_key = ProviderEnum.THESPORTSDB.value
    trust_tier = 3

    def __init__(
        self,
        *,
        http: BaseHttpClient,
        api_key: str = "3",
        sports: Sequence[SportsDbSport] = SPORTSDB_SPORTS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(clock=clock)
        self._http = http
        self._api_key = api_key
        self._sports = tuple(sports)

    def close(self) -> None:
        self._http.close()

    def _targets(self, query: FetchQuery) -> Sequence[SportsDbSport]:
        if query.sport is None:
            return [s for s in self._sports if s.primary]
        return [s for s in self._sports if s.sport == query.sport]

    def _fetch_target(self, target: SportsDbSport, query: FetchQuery) -> Iterable[Json]:
        if query.is_live:
            path = f"/{self._api_key}/livescore.php"
            params = {"s": target.name}
        else:
            path = f"/{self._api_key}/eventsday.php"
            params = {"d": self._clock().date().isoformat(), "s": target.name}

        payload = self._http.get_json(path, params=params)
        # "No events" comes back as {"events": null}.
        events = payload.get("events") or []
        if not isinstance(events, list):
            raise ProviderResponseError(f"TheSportsDB 'events' is not a list: {type(events)}")
        return [e for e in events if isinstance(e, dict)]

    def _map_item(self, item: Json, target: SportsDbSport, *, fetched_at: datetime) -> RawEvent:
        provider_id = require_str(item, "idEvent", what="event id")
        home = require_str(item, "strHomeTeam", what="home team")
        away = require_str(item, "strAwayTeam", what="away team")

        try:
            if item.get("strTimestamp"):
                start_time = parse_provider_datetime(item["strTimestamp"])
            else:
                start_time = parse_provider_datetime(
                    {"date": item.get("dateEvent"), "time": item.get("strTime") or "00:00"}
                )
        except ValueError as e:
            raise ProviderMappingError(str(e), context={"idEvent": provider_id}) from e

        status = map_sportsdb_status(
            item.get("strStatus"), start_time=start_time, fetched_at=fetched_at
        )
        is_live = status in (EventStatusEnum.IN_PROGRESS, EventStatusEnum.HALF_TIME)

        score = None
        if item.get("intHomeScore") not in (None, "") and status != EventStatusEnum.SCHEDULED:
            score = Score.parse(item.get("intHomeScore"), item.get("intAwayScore"))

        return RawEvent(
            provider_key=self.provider_key,
            provider_event_id=provider_id,
            sport_label=item.get("strSport") or target.name,
            league=str(item.get("strLeague") or ""),
            home=home,
            away=away,
            start_time=start_time,
            is_live=is_live,
            status=status,
            fetched_at=fetched_at,
            score=score,
        )
