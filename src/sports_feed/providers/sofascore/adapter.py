from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from sports_feed.core.dates import parse_provider_datetime, utc_now
from sports_feed.domain.enums import EventStatusEnum, ProviderEnum, SportEnum
from sports_feed.domain.event import Score
from sports_feed.providers.base.adapter import RecordMappingAdapter, dig, require_str
from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.errors import ProviderMappingError, ProviderResponseError
from sports_feed.providers.base.types import FetchQuery, Json, RawEvent

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "application/json",
    "Referer": "https://www.sofascore.com/",
}


@dataclass(frozen=True)
class SofaSport:
    sport: SportEnum
    slug: str
    primary: bool = False


SOFA_SPORTS: tuple[SofaSport, ...] = (
    SofaSport(SportEnum.FOOTBALL, "football", primary=True),
    SofaSport(SportEnum.BASKETBALL, "basketball", primary=True),
    SofaSport(SportEnum.TENNIS, "tennis", primary=True),
    SofaSport(SportEnum.ICE_HOCKEY, "ice-hockey", primary=True),
    SofaSport(SportEnum.BASEBALL, "baseball"),
    SofaSport(SportEnum.AMERICAN_FOOTBALL, "american-football"),
    SofaSport(SportEnum.RUGBY, "rugby"),
    SofaSport(SportEnum.CRICKET, "cricket"),
    SofaSport(SportEnum.MMA, "mma"),
)

_STATUS_BY_TYPE: dict[str, EventStatusEnum] = {
    "notstarted": EventStatusEnum.SCHEDULED,
    "inprogress": EventStatusEnum.IN_PROGRESS,
    "finished": EventStatusEnum.FINISHED,
    "postponed": EventStatusEnum.POSTPONED,
    "canceled": EventStatusEnum.POSTPONED,
    "interrupted": EventStatusEnum.POSTPONED,
    "suspended": EventStatusEnum.POSTPONED,
}


def map_sofascore_status(status: object) -> EventStatusEnum:
    if not isinstance(status, dict):
        raise ProviderMappingError("Missing status")

    mapped = _STATUS_BY_TYPE.get(str(status.get("type") or "").lower())
    if mapped is None:
        raise ProviderMappingError("Unknown SofaScore status", context={"status": status})

    description = str(status.get("description") or "").lower()
    if mapped == EventStatusEnum.IN_PROGRESS and description in {"halftime", "half time", "pause"}:
        return EventStatusEnum.HALF_TIME
    return mapped


class SofaScoreAdapter(RecordMappingAdapter[SofaSport]):
    """
    SofaScore's site JSON. Scraped, so the least trusted authentic source.
    """

    provider_key = ProviderEnum.SOFASCORE.value
    trust_tier = 3

    def __init__(
        self,
        *,
        http: BaseHttpClient,
        sports: Sequence[SofaSport] = SOFA_SPORTS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(clock=clock)
        self._http = http
        self._sports = tuple(sports)

    def close(self) -> None:
        self._http.close()

    def _targets(self, query: FetchQuery) -> Sequence[SofaSport]:
        if query.sport is None:
            return [s for s in self._sports if s.primary]
        return [s for s in self._sports if s.sport == query.sport]

    def _fetch_target(self, target: SofaSport, query: FetchQuery) -> Iterable[Json]:
        if query.is_live:
            path = f"/sport/{target.slug}/events/live"
        else:
            path = f"/sport/{target.slug}/scheduled-events/{self._clock().date().isoformat()}"

        payload = self._http.get_json(path)
        events = payload.get("events", [])
        if not isinstance(events, list):
            raise ProviderResponseError(f"SofaScore 'events' is not a list: {type(events)}")
        return [e for e in events if isinstance(e, dict)]

    def _map_item(self, item: Json, target: SofaSport, *, fetched_at: datetime) -> RawEvent:
        provider_id = require_str(item, "id", what="event id")
        home = require_str(item, "homeTeam", "name", what="home team")
        away = require_str(item, "awayTeam", "name", what="away team")

        status = map_sofascore_status(item.get("status"))
        is_live = status in (EventStatusEnum.IN_PROGRESS, EventStatusEnum.HALF_TIME)

        ts = item.get("startTimestamp")
        if not isinstance(ts, int) or isinstance(ts, bool):
            raise ProviderMappingError("Missing startTimestamp", context={"id": provider_id})
        start_time = parse_provider_datetime(ts)

        score = None
        if status != EventStatusEnum.SCHEDULED and dig(item, "homeScore", "current") is not None:
            score = Score.parse(
                dig(item, "homeScore", "current"), dig(item, "awayScore", "current")
            )

        league = dig(item, "tournament", "uniqueTournament", "name") or dig(
            item, "tournament", "name"
        )

        return RawEvent(
            provider_key=self.provider_key,
            provider_event_id=provider_id,
            sport_label=dig(item, "tournament", "category", "sport", "slug") or target.slug,
            league=str(league or ""),
            home=home,
            away=away,
            start_time=start_time,
            is_live=is_live,
            status=status,
            fetched_at=fetched_at,
            score=score,
        )
