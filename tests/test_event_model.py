from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from sports_feed.domain.enums import EventStatusEnum, SportEnum
from sports_feed.domain.event import (
    Event,
    EventValidationError,
    Odds,
    Provenance,
    Score,
    parse_decimal_odds,
)

NOW = datetime(2025, 9, 7, 18, 0, tzinfo=UTC)


def _event(**overrides: object) -> Event:
    base: dict[str, object] = {
        "event_id": "espn:1",
        "sport": SportEnum.FOOTBALL,
        "league": "Premier League",
        "home": "Arsenal",
        "away": "Chelsea",
        "start_time": NOW,
        "is_live": False,
        "status": EventStatusEnum.SCHEDULED,
        "provenance": Provenance(provider_key="espn", trust_tier=2),
        "fetched_at": NOW,
    }
    base.update(overrides)
    return Event(**base)  # type: ignore[arg-type]


def test_parse_decimal_odds_rejects_one_and_below() -> None:
    assert parse_decimal_odds("1.00") is None
    assert parse_decimal_odds(1.0) is None
    assert parse_decimal_odds(0.5) is None
    assert parse_decimal_odds(1.004) is None
    assert parse_decimal_odds(1.01) == Decimal("1.01")
    assert parse_decimal_odds("2.456") == Decimal("2.46")


def test_parse_decimal_odds_rejects_garbage() -> None:
    assert parse_decimal_odds(None) is None
    assert parse_decimal_odds(True) is None
    assert parse_decimal_odds("evens") is None
    assert parse_decimal_odds(float("nan")) is None
    assert parse_decimal_odds(float("inf")) is None
    assert parse_decimal_odds(1e30) is None
    assert parse_decimal_odds("9" * 40) is None


def test_odds_constructor_enforces_minimum() -> None:
    with pytest.raises(EventValidationError):
        Odds(home=Decimal("1.00"), away=Decimal("2.00"))
    with pytest.raises(EventValidationError):
        Odds(home=Decimal("2.00"), away=Decimal("2.00"), draw=Decimal("0.99"))


def test_odds_from_prices_drops_invalid_draw_only() -> None:
    odds = Odds.from_prices("2.10", "3.40", "1.00")
    assert odds == Odds(home=Decimal("2.10"), away=Decimal("3.40"))
    assert Odds.from_prices("1.00", "3.40", "3.0") is None


def test_score_parse_is_lenient_but_score_is_strict() -> None:
    assert Score.parse("2", 1) == Score(home=2, away=1)
    assert Score.parse(None, 1) is None
    assert Score.parse("-1", 1) is None
    with pytest.raises(EventValidationError):
        Score(home=-1, away=0)


def test_live_event_cannot_be_scheduled_or_finished() -> None:
    with pytest.raises(EventValidationError):
        _event(is_live=True, status=EventStatusEnum.SCHEDULED)
    with pytest.raises(EventValidationError):
        _event(is_live=True, status=EventStatusEnum.FINISHED)
    with pytest.raises(EventValidationError):
        _event(is_live=False, status=EventStatusEnum.IN_PROGRESS)

    live = _event(is_live=True, status=EventStatusEnum.HALF_TIME, score=Score(1, 0))
    assert live.is_live


def test_participants_must_differ_after_normalization() -> None:
    with pytest.raises(EventValidationError):
        _event(home="Arsenal", away="  ARSENAL ")
    with pytest.raises(EventValidationError):
        _event(home=" ", away="Chelsea")


def test_start_time_must_be_timezone_aware() -> None:
    with pytest.raises(EventValidationError):
        _event(start_time=datetime(2025, 9, 7, 18, 0))


def test_draw_price_only_on_draw_eligible_sports() -> None:
    three_way = Odds(home=Decimal("2.1"), away=Decimal("3.5"), draw=Decimal("3.2"))
    assert _event(odds=three_way).odds == three_way

    with pytest.raises(EventValidationError):
        _event(sport=SportEnum.BASKETBALL, home="Lakers", away="Celtics", odds=three_way)


def test_synthetic_flag_must_match_provenance() -> None:
    with pytest.raises(EventValidationError):
        _event(synthetic=True)
    with pytest.raises(EventValidationError):
        _event(provenance=Provenance(provider_key="synthetic", trust_tier=99))

    ok = _event(
        event_id="synthetic:football-upcoming-0",
        provenance=Provenance(provider_key="synthetic", trust_tier=99),
        synthetic=True,
    )
    assert ok.synthetic


def test_dedupe_key_is_trimmed_lowercase() -> None:
    a = _event(home="Arsenal", away="Chelsea")
    b = replace(a, event_id="sofascore:9", home=" arsenal ", away="CHELSEA")
    assert a.dedupe_key == b.dedupe_key == ("arsenal", "chelsea", SportEnum.FOOTBALL)


def test_to_dict_serializes_decimals_and_timestamps() -> None:
    event = _event(odds=Odds(home=Decimal("2.10"), away=Decimal("3.40"), draw=Decimal("3.25")))
    data = event.to_dict()
    assert data["start_time"] == "2025-09-07T18:00:00Z"
    assert data["odds"] == {"home": "2.10", "away": "3.40", "draw": "3.25"}
    assert data["score"] is None
    assert data["source"] == "espn"
    assert data["synthetic"] is False
