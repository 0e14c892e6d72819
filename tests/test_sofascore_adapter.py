from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx

from sports_feed.domain.enums import EventStatusEnum, FetchErrorKind, SportEnum
from sports_feed.domain.event import Score
from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.types import FetchQuery
from sports_feed.providers.sofascore.adapter import (
    BROWSER_HEADERS,
    SofaScoreAdapter,
    map_sofascore_status,
)

NOW = datetime(2025, 9, 7, 18, 0, tzinfo=UTC)


def _adapter(handler: Any) -> SofaScoreAdapter:
    http = BaseHttpClient(
        base_url="https://api.sofascore.com/api/v1",
        headers=BROWSER_HEADERS,
        transport=httpx.MockTransport(handler),
    )
    return SofaScoreAdapter(http=http, clock=lambda: NOW)


def _event(eid: int, home: str, away: str, status: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {
        "id": eid,
        "homeTeam": {"name": home},
        "awayTeam": {"name": away},
        "status": status,
        "startTimestamp": 1757264400,
        "tournament": {
            "name": "Premier League",
            "uniqueTournament": {"name": "Premier League"},
            "category": {"sport": {"slug": "football"}},
        },
        **extra,
    }


def test_status_mapping_detects_halftime() -> None:
    assert map_sofascore_status({"type": "inprogress", "description": "1st half"}) == (
        EventStatusEnum.IN_PROGRESS
    )
    assert map_sofascore_status({"type": "inprogress", "description": "Halftime"}) == (
        EventStatusEnum.HALF_TIME
    )
    assert map_sofascore_status({"type": "notstarted"}) == EventStatusEnum.SCHEDULED
    assert map_sofascore_status({"type": "canceled"}) == EventStatusEnum.POSTPONED


def test_live_feed_maps_scores_and_drops_bad_rows() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/sport/football/events/live"
        assert "Mozilla" in request.headers["User-Agent"]
        return httpx.Response(
            200,
            json={
                "events": [
                    _event(
                        11,
                        "Arsenal",
                        "Chelsea",
                        {"type": "inprogress", "description": "2nd half"},
                        homeScore={"current": 2},
                        awayScore={"current": 1},
                    ),
                    _event(12, "Liverpool", "Everton", {"type": "weird"}),
                    {"id": 13, "homeTeam": {"name": "Leeds"}},
                ]
            },
        )

    result = _adapter(handler).fetch(FetchQuery(sport=SportEnum.FOOTBALL, is_live=True))

    assert result.ok
    assert len(result.events) == 1
    event = result.events[0]
    assert event.provider_event_id == "11"
    assert event.sport_label == "football"
    assert event.league == "Premier League"
    assert event.score == Score(2, 1)
    assert event.start_time == datetime(2025, 9, 7, 17, 0, tzinfo=UTC)
    assert len(result.dropped) == 2


def test_scheduled_feed_uses_date_path() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/sport/ice-hockey/scheduled-events/2025-09-07"
        return httpx.Response(200, json={"events": []})

    result = _adapter(handler).fetch(FetchQuery(sport=SportEnum.ICE_HOCKEY, is_live=False))

    assert result.ok
    assert result.events == []


def test_blocked_scraper_is_unauthorized() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="Forbidden")

    result = _adapter(handler).fetch(FetchQuery(sport=SportEnum.TENNIS))

    assert result.error is not None
    assert result.error.kind == FetchErrorKind.UNAUTHORIZED
    assert result.error.provider_key == "sofascore"


def test_out_of_range_timestamp_drops_only_that_row() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "events": [
                    _event(21, "Arsenal", "Chelsea", {"type": "notstarted"}),
                    _event(22, "Leeds", "Burnley", {"type": "notstarted"}, startTimestamp=10**20),
                ]
            },
        )

    result = _adapter(handler).fetch(FetchQuery(sport=SportEnum.FOOTBALL, is_live=False))

    assert result.ok
    assert [e.provider_event_id for e in result.events] == ["21"]
    assert len(result.dropped) == 1
