from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx
import pytest

from sports_feed.domain.enums import EventStatusEnum, SportEnum
from sports_feed.domain.event import Score
from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.errors import ProviderMappingError
from sports_feed.providers.base.types import FetchQuery
from sports_feed.providers.thesportsdb.adapter import TheSportsDbAdapter, map_sportsdb_status

NOW = datetime(2025, 9, 7, 18, 0, tzinfo=UTC)
EARLIER = datetime(2025, 9, 7, 15, 0, tzinfo=UTC)
LATER = datetime(2025, 9, 7, 20, 0, tzinfo=UTC)


def _adapter(handler: Any) -> TheSportsDbAdapter:
    http = BaseHttpClient(
        base_url="https://www.thesportsdb.com/api/v1/json",
        transport=httpx.MockTransport(handler),
    )
    return TheSportsDbAdapter(http=http, api_key="3", clock=lambda: NOW)


def test_status_mapping() -> None:
    def started(value: str) -> EventStatusEnum:
        return map_sportsdb_status(value, start_time=EARLIER, fetched_at=NOW)

    assert map_sportsdb_status("NS", start_time=LATER, fetched_at=NOW) == EventStatusEnum.SCHEDULED
    assert started("HT") == EventStatusEnum.HALF_TIME
    assert started("2H") == EventStatusEnum.IN_PROGRESS
    assert started("Match Finished") == EventStatusEnum.FINISHED
    assert started("Postponed") == EventStatusEnum.POSTPONED


def test_missing_status_depends_on_start_time() -> None:
    assert map_sportsdb_status(None, start_time=LATER, fetched_at=NOW) == EventStatusEnum.SCHEDULED
    with pytest.raises(ProviderMappingError):
        map_sportsdb_status("", start_time=EARLIER, fetched_at=NOW)


def test_day_schedule_maps_events_and_drops_unknown_started_rows() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/3/eventsday.php")
        assert request.url.params["d"] == "2025-09-07"
        assert request.url.params["s"] == "Soccer"
        return httpx.Response(
            200,
            json={
                "events": [
                    {
                        "idEvent": "9001",
                        "strSport": "Soccer",
                        "strLeague": "English Premier League",
                        "strHomeTeam": "Arsenal",
                        "strAwayTeam": "Chelsea",
                        "strTimestamp": "2025-09-07T20:00:00",
                        "strStatus": "Not Started",
                        "intHomeScore": None,
                        "intAwayScore": None,
                    },
                    {
                        "idEvent": "9002",
                        "strSport": "Soccer",
                        "strLeague": "English Premier League",
                        "strHomeTeam": "Liverpool",
                        "strAwayTeam": "Everton",
                        "dateEvent": "2025-09-07",
                        "strTime": "14:00:00",
                        "strStatus": "FT",
                        "intHomeScore": "2",
                        "intAwayScore": "0",
                    },
                    {
                        "idEvent": "9003",
                        "strSport": "Soccer",
                        "strHomeTeam": "Leeds",
                        "strAwayTeam": "Burnley",
                        "dateEvent": "2025-09-07",
                        "strTime": "12:00:00",
                        "strStatus": None,
                    },
                ]
            },
        )

    result = _adapter(handler).fetch(FetchQuery(sport=SportEnum.FOOTBALL))

    assert result.ok
    upcoming, finished = result.events
    assert upcoming.status == EventStatusEnum.SCHEDULED
    assert upcoming.start_time == datetime(2025, 9, 7, 20, 0, tzinfo=UTC)
    assert upcoming.sport_label == "Soccer"
    assert finished.status == EventStatusEnum.FINISHED
    assert finished.score == Score(2, 0)
    assert finished.start_time == datetime(2025, 9, 7, 14, 0, tzinfo=UTC)
    assert len(result.dropped) == 1


def test_upcoming_query_excludes_finished_events() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "events": [
                    {
                        "idEvent": "1",
                        "strHomeTeam": "Liverpool",
                        "strAwayTeam": "Everton",
                        "strTimestamp": "2025-09-07T14:00:00",
                        "strStatus": "FT",
                    }
                ]
            },
        )

    result = _adapter(handler).fetch(FetchQuery(sport=SportEnum.FOOTBALL, is_live=False))
    assert result.ok
    assert result.events == []


def test_live_query_uses_livescore_and_null_events_is_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/3/livescore.php")
        return httpx.Response(200, json={"events": None})

    result = _adapter(handler).fetch(FetchQuery(sport=SportEnum.ICE_HOCKEY, is_live=True))

    assert result.ok
    assert result.events == []
