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


@dataclass(frozen=True)
class EspnLeague:
    sport: SportEnum
    espn_sport: str
    league: str
    # Only "primary" leagues are polled for all-sports queries.
    primary: bool = False


ESPN_LEAGUES: tuple[EspnLeague, ...] = (
    EspnLeague(SportEnum.FOOTBALL, "soccer", "eng.1", primary=True),
    EspnLeague(SportEnum.FOOTBALL, "soccer", "esp.1"),
    EspnLeague(SportEnum.FOOTBALL, "soccer", "ger.1"),
    EspnLeague(SportEnum.FOOTBALL, "soccer", "ita.1"),
    EspnLeague(SportEnum.FOOTBALL, "soccer", "fra.1"),
    EspnLeague(SportEnum.FOOTBALL, "soccer", "uefa.champions"),
    EspnLeague(SportEnum.BASKETBALL, "basketball", "nba", primary=True),
    EspnLeague(SportEnum.BASKETBALL, "basketball", "wnba"),
    EspnLeague(SportEnum.BASEBALL, "baseball", "mlb", primary=True),
    EspnLeague(SportEnum.ICE_HOCKEY, "hockey", "nhl", primary=True),
    EspnLeague(SportEnum.AMERICAN_FOOTBALL, "football", "nfl", primary=True),
    EspnLeague(SportEnum.AMERICAN_FOOTBALL, "football", "college-football"),
    EspnLeague(SportEnum.MMA, "mma", "ufc", primary=True),
)

_STATUS_BY_NAME: dict[str, EventStatusEnum] = {
    "STATUS_SCHEDULED": EventStatusEnum.SCHEDULED,
    "STATUS_HALFTIME": EventStatusEnum.HALF_TIME,
    "STATUS_FINAL": EventStatusEnum.FINISHED,
    "STATUS_FULL_TIME": EventStatusEnum.FINISHED,
    "STATUS_FINAL_AET": EventStatusEnum.FINISHED,
    "STATUS_FINAL_PEN": EventStatusEnum.FINISHED,
    "STATUS_POSTPONED": EventStatusEnum.POSTPONED,
    "STATUS_CANCELED": EventStatusEnum.POSTPONED,
    "STATUS_SUSPENDED": EventStatusEnum.POSTPONED,
    "STATUS_ABANDONED": EventStatusEnum.POSTPONED,
    "STATUS_FORFEIT": EventStatusEnum.POSTPONED,
}

_STATUS_BY_STATE: dict[str, EventStatusEnum] = {
    "pre": EventStatusEnum.SCHEDULED,
    "in": EventStatusEnum.IN_PROGRESS,
    "post": EventStatusEnum.FINISHED,
}


def map_espn_status(status_type: object) -> EventStatusEnum:
    if not isinstance(status_type, dict):
        raise ProviderMappingError("Missing status.type")

    name = status_type.get("name")
    if isinstance(name, str) and name in _STATUS_BY_NAME:
        return _STATUS_BY_NAME[name]

    state = status_type.get("state")
    if isinstance(state, str) and state in _STATUS_BY_STATE:
        return _STATUS_BY_STATE[state]

    raise ProviderMappingError("Unknown ESPN status", context={"name": name, "state": state})


class EspnAdapter(RecordMappingAdapter[EspnLeague]):
    """
    ESPN public scoreboard JSON: reliable schedules, scores and status; no odds.
    """

    provider_key = ProviderEnum.ESPN.value
    trust_tier = 2

    def __init__(
        self,
        *,
        http: BaseHttpClient,
        leagues: Sequence[EspnLeague] = ESPN_LEAGUES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(clock=clock)
        self._http = http
        self._leagues = tuple(leagues)

    def close(self) -> None:
        self._http.close()

    def _targets(self, query: FetchQuery) -> Sequence[EspnLeague]:
        if query.sport is None:
            return [lg for lg in self._leagues if lg.primary]
        return [lg for lg in self._leagues if lg.sport == query.sport]

    def _fetch_target(self, target: EspnLeague, query: FetchQuery) -> Iterable[Json]:
        payload = self._http.get_json(f"/{target.espn_sport}/{target.league}/scoreboard")
        events = payload.get("events", [])
        if not isinstance(events, list):
            raise ProviderResponseError(f"ESPN 'events' is not a list: {type(events)}")

        league_name = dig(payload, "leagues", 0, "name") or target.league
        return [{**e, "_league": league_name} for e in events if isinstance(e, dict)]

    def _map_item(self, item: Json, target: EspnLeague, *, fetched_at: datetime) -> RawEvent:
        provider_id = require_str(item, "id", what="event id")

        competitors = dig(item, "competitions", 0, "competitors")
        if not isinstance(competitors, list):
            raise ProviderMappingError("Missing competitors", context={"id": provider_id})
        by_side = {c.get("homeAway"): c for c in competitors if isinstance(c, dict)}
        if "home" not in by_side or "away" not in by_side:
            raise ProviderMappingError("Missing home/away competitor", context={"id": provider_id})

        home_c, away_c = by_side["home"], by_side["away"]
        home = require_str(home_c, "team", "displayName", what="home team")
        away = require_str(away_c, "team", "displayName", what="away team")

        status = map_espn_status(dig(item, "status", "type"))
        is_live = status in (EventStatusEnum.IN_PROGRESS, EventStatusEnum.HALF_TIME)

        try:
            start_time = parse_provider_datetime(item.get("date"))
        except ValueError as e:
            raise ProviderMappingError(str(e), context={"id": provider_id}) from e

        score = None
        if status != EventStatusEnum.SCHEDULED:
            score = Score.parse(home_c.get("score"), away_c.get("score"))

        return RawEvent(
            provider_key=self.provider_key,
            provider_event_id=provider_id,
            sport_label=target.espn_sport,
            league=str(item.get("_league") or ""),
            home=home,
            away=away,
            start_time=start_time,
            is_live=is_live,
            status=status,
            fetched_at=fetched_at,
            score=score,
        )
