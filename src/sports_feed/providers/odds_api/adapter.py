from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime

from sports_feed.core.dates import parse_provider_datetime, utc_now
from sports_feed.domain.enums import EventStatusEnum, ProviderEnum, SportEnum
from sports_feed.providers.base.adapter import RecordMappingAdapter, require_str
from sports_feed.providers.base.errors import ProviderMappingError
from sports_feed.providers.base.types import FetchQuery, Json, RawEvent
from sports_feed.providers.odds_api.client import OddsApiClient
from sports_feed.providers.odds_api.parser import parse_best_h2h_prices

UPCOMING = "upcoming"

DEFAULT_SPORT_KEYS: Mapping[SportEnum, tuple[str, ...]] = {
    SportEnum.FOOTBALL: (
        "soccer_epl",
        "soccer_spain_la_liga",
        "soccer_germany_bundesliga",
        "soccer_italy_serie_a",
        "soccer_france_ligue_one",
        "soccer_uefa_champs_league",
    ),
    SportEnum.BASKETBALL: ("basketball_nba", "basketball_euroleague"),
    SportEnum.ICE_HOCKEY: ("icehockey_nhl",),
    SportEnum.BASEBALL: ("baseball_mlb",),
    SportEnum.AMERICAN_FOOTBALL: ("americanfootball_nfl", "americanfootball_ncaaf"),
    SportEnum.RUGBY: ("rugbyleague_nrl",),
    SportEnum.CRICKET: ("cricket_ipl",),
    SportEnum.MMA: ("mma_mixed_martial_arts",),
    SportEnum.BOXING: ("boxing_boxing",),
}


class OddsApiAdapter(RecordMappingAdapter[str]):
    """
    The Odds API: priced events (decimal h2h), no scores.

    All-sports queries use the single `upcoming` feed to save quota; a sport
    filter fans out over that sport's configured keys.
    """

    provider_key = ProviderEnum.ODDS_API.value
    trust_tier = 1

    def __init__(
        self,
        *,
        client: OddsApiClient,
        regions: str = "eu",
        sport_keys: Mapping[SportEnum, Sequence[str]] = DEFAULT_SPORT_KEYS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(clock=clock)
        self._client = client
        self._regions = regions
        self._sport_keys = {k: tuple(v) for k, v in sport_keys.items()}

    def close(self) -> None:
        self._client.close()

    def _targets(self, query: FetchQuery) -> Sequence[str]:
        if query.sport is None:
            return [UPCOMING]
        return list(self._sport_keys.get(query.sport, ()))

    def _fetch_target(self, target: str, query: FetchQuery) -> Iterable[Json]:
        return self._client.get_odds(sport_key=target, regions=self._regions)

    def _map_item(self, item: Json, target: str, *, fetched_at: datetime) -> RawEvent:
        provider_id = require_str(item, "id", what="event id")
        home = require_str(item, "home_team", what="home team")
        away = require_str(item, "away_team", what="away team")
        sport_key = require_str(item, "sport_key", what="sport key")

        try:
            start_time = parse_provider_datetime(item.get("commence_time"))
        except ValueError as e:
            raise ProviderMappingError(str(e), context={"id": provider_id}) from e

        # No status field: an event whose commence time has passed is in play.
        is_live = start_time <= fetched_at
        status = EventStatusEnum.IN_PROGRESS if is_live else EventStatusEnum.SCHEDULED

        return RawEvent(
            provider_key=self.provider_key,
            provider_event_id=provider_id,
            sport_label=sport_key.split("_", 1)[0],
            league=str(item.get("sport_title") or ""),
            home=home,
            away=away,
            start_time=start_time,
            is_live=is_live,
            status=status,
            fetched_at=fetched_at,
            odds=parse_best_h2h_prices(item).to_odds(),
        )
