from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from sports_feed.aggregation.cascade import CascadeController, CascadePolicy
from sports_feed.aggregation.errors import AggregationCycleFailure, AggregatorConfigError
from sports_feed.aggregation.synthetic import SyntheticGenerator
from sports_feed.domain.enums import EventStatusEnum, FetchErrorKind, SportEnum
from sports_feed.domain.event import Odds, Score
from sports_feed.providers.base.errors import FetchError
from sports_feed.providers.base.types import FetchQuery, FetchResult, RawEvent

NOW = datetime(2025, 9, 7, 18, 0, tzinfo=UTC)

FIXTURES = [
    ("Arsenal", "Chelsea"),
    ("Liverpool", "Everton"),
    ("Leeds", "Burnley"),
    ("Fulham", "Brentford"),
    ("Wolves", "Brighton"),
]


def _raw(
    provider: str,
    home: str,
    away: str,
    *,
    label: str = "football",
    live: bool = False,
    odds: Odds | None = None,
    score: Score | None = None,
) -> RawEvent:
    return RawEvent(
        provider_key=provider,
        provider_event_id=f"{home}-{away}".lower(),
        sport_label=label,
        league="Premier League",
        home=home,
        away=away,
        start_time=NOW + timedelta(hours=2),
        is_live=live,
        status=EventStatusEnum.IN_PROGRESS if live else EventStatusEnum.SCHEDULED,
        fetched_at=NOW,
        score=score,
        odds=odds,
    )


def _espn_fixtures() -> list[RawEvent]:
    return [_raw("espn", home, away, label="soccer") for home, away in FIXTURES]


@dataclass
class StaticAdapter:
    provider_key: str
    trust_tier: int
    events: list[RawEvent] = field(default_factory=list)
    error: FetchError | None = None
    delay_s: float = 0.0
    calls: int = 0

    def fetch(self, query: FetchQuery) -> FetchResult:
        self.calls += 1
        if self.delay_s:
            time.sleep(self.delay_s)
        return FetchResult(
            provider_key=self.provider_key, events=list(self.events), error=self.error
        )


@dataclass
class BlockingAdapter:
    provider_key: str
    release: threading.Event
    trust_tier: int = 2

    def fetch(self, query: FetchQuery) -> FetchResult:
        self.release.wait(timeout=5.0)
        return FetchResult(
            provider_key=self.provider_key,
            events=[_raw(self.provider_key, "Late", "Arrival")],
        )


@dataclass
class ExplodingAdapter:
    provider_key: str = "broken"
    trust_tier: int = 2

    def fetch(self, query: FetchQuery) -> FetchResult:
        raise KeyError("unexpected payload shape")


def _timeout(provider: str) -> FetchError:
    return FetchError(provider_key=provider, kind=FetchErrorKind.TIMEOUT, message="timed out")


def _controller(adapters: list, **policy: object) -> CascadeController:  # type: ignore[type-arg]
    defaults: dict[str, object] = {
        "adapter_timeout_s": 1.0,
        "cycle_deadline_s": 2.0,
        "min_events_all": 10,
        "min_events_single": 3,
        "synthetic_target_per_sport": 4,
    }
    defaults.update(policy)
    return CascadeController(
        adapters,
        policy=CascadePolicy(**defaults),  # type: ignore[arg-type]
        synthetic=SyntheticGenerator(target_per_sport=4, seed=1, clock=lambda: NOW),
        clock=lambda: NOW,
    )


def test_timeout_plus_duplicates_yields_trusted_events_with_backfill() -> None:
    odds = Odds(home=Decimal("2.10"), away=Decimal("3.40"), draw=Decimal("3.30"))
    a = StaticAdapter("odds_api", 1, error=_timeout("odds_api"))
    b = StaticAdapter("espn", 2, events=_espn_fixtures())
    c = StaticAdapter(
        "sofascore",
        3,
        events=[
            _raw("sofascore", "arsenal", "CHELSEA", odds=odds),
            _raw("sofascore", "Liverpool", "Everton", odds=odds),
        ],
    )

    result = _controller([a, b, c]).run(FetchQuery(sport=SportEnum.FOOTBALL), cycle_id=1)

    assert len(result.events) == 5
    assert result.synthetic_count == 0
    assert result.authentic_count == 5
    assert {e.provenance.provider_key for e in result.events} == {"espn"}
    priced = {e.home for e in result.events if e.odds is not None}
    assert priced == {"Arsenal", "Liverpool"}
    assert [f.provider_key for f in result.failures] == ["odds_api"]
    assert result.failures[0].kind == FetchErrorKind.TIMEOUT


def test_all_adapters_failing_pads_every_sport_with_synthetic_events() -> None:
    adapters = [
        StaticAdapter("api_sports", 1, error=_timeout("api_sports")),
        StaticAdapter(
            "espn",
            2,
            error=FetchError("espn", FetchErrorKind.UNREACHABLE, "connection refused"),
        ),
    ]

    result = _controller(adapters).run(FetchQuery(), cycle_id=1)

    assert result.authentic_count == 0
    assert result.synthetic_count == len(result.events) == 4 * len(SportEnum)
    assert all(e.synthetic for e in result.events)
    assert all(e.provenance.provider_key == "synthetic" for e in result.events)
    assert len(result.failures) == 2


def test_padding_tops_up_only_what_is_missing() -> None:
    adapter = StaticAdapter("espn", 2, events=[_raw("espn", "Arsenal", "Chelsea", label="soccer")])

    result = _controller([adapter]).run(FetchQuery(sport=SportEnum.FOOTBALL), cycle_id=1)

    assert result.authentic_count == 1
    assert result.synthetic_count == 3
    assert len({e.dedupe_key for e in result.events}) == 4


def test_enough_authentic_events_means_no_synthesis() -> None:
    adapter = StaticAdapter("espn", 2, events=_espn_fixtures())

    result = _controller([adapter], min_events_all=5).run(FetchQuery(), cycle_id=1)

    assert result.synthetic_count == 0
    assert len(result.events) == 5


def test_sport_and_live_filters_apply_after_classification() -> None:
    adapter = StaticAdapter(
        "espn",
        2,
        events=[
            _raw("espn", "Arsenal", "Chelsea", label="soccer", live=True, score=Score(1, 0)),
            _raw("espn", "Liverpool", "Everton", label="soccer"),
            _raw("espn", "Chiefs", "Bills", label="football", live=True, score=Score(7, 3)),
        ],
    )

    result = _controller([adapter], min_events_single=1).run(
        FetchQuery(sport=SportEnum.FOOTBALL, is_live=True), cycle_id=1
    )

    assert [(e.home, e.is_live) for e in result.events] == [("Arsenal", True)]


def test_hung_adapter_is_abandoned_at_its_timeout_not_the_deadline() -> None:
    release = threading.Event()
    slow = BlockingAdapter("thesportsdb", release)
    fast = StaticAdapter("espn", 2, events=_espn_fixtures())
    controller = _controller(
        [slow, fast], adapter_timeout_s=0.1, cycle_deadline_s=1.5, min_events_single=1
    )

    started = time.monotonic()
    try:
        result = controller.run(FetchQuery(sport=SportEnum.FOOTBALL), cycle_id=1)
    finally:
        release.set()
    elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert len(result.events) == 5
    assert all(e.home != "Late" for e in result.events)
    assert [(f.provider_key, f.kind) for f in result.failures] == [
        ("thesportsdb", FetchErrorKind.TIMEOUT)
    ]


def test_adapter_wait_is_capped_by_time_left_in_the_cycle() -> None:
    readings = iter([0.0])

    def monotonic() -> float:
        # The cycle starts at 0.0; by fan-out time 1.95s of the 2s deadline are gone.
        return next(readings, 1.95)

    release = threading.Event()
    controller = CascadeController(
        [BlockingAdapter("thesportsdb", release)],
        policy=CascadePolicy(adapter_timeout_s=1.0, cycle_deadline_s=2.0),
        synthetic=SyntheticGenerator(seed=1, clock=lambda: NOW),
        monotonic=monotonic,
        clock=lambda: NOW,
    )

    started = time.monotonic()
    try:
        result = controller.run(FetchQuery(sport=SportEnum.TENNIS), cycle_id=1)
    finally:
        release.set()

    assert time.monotonic() - started < 0.8
    assert result.failures[0].kind == FetchErrorKind.TIMEOUT


def test_adapter_slower_than_its_own_timeout_is_discarded() -> None:
    slow = StaticAdapter("sofascore", 3, events=[_raw("sofascore", "Late", "Arrival")], delay_s=0.2)
    fast = StaticAdapter("espn", 2, events=_espn_fixtures())

    result = _controller(
        [slow, fast], adapter_timeout_s=0.05, cycle_deadline_s=1.0, min_events_single=1
    ).run(FetchQuery(sport=SportEnum.FOOTBALL), cycle_id=1)

    assert all(e.home != "Late" for e in result.events)
    assert result.failures[0].provider_key == "sofascore"
    assert result.failures[0].kind == FetchErrorKind.TIMEOUT


def test_output_does_not_depend_on_completion_order() -> None:
    odds = Odds(home=Decimal("2.10"), away=Decimal("3.40"), draw=Decimal("3.30"))
    b_events = _espn_fixtures()
    c_events = [
        _raw("sofascore", "Arsenal", "Chelsea", odds=odds),
        _raw("sofascore", "Spurs", "Villa"),
    ]

    def run(b_delay: float, c_delay: float) -> list:  # type: ignore[type-arg]
        b = StaticAdapter("espn", 2, events=b_events, delay_s=b_delay)
        c = StaticAdapter("sofascore", 3, events=c_events, delay_s=c_delay)
        return _controller([b, c], min_events_single=1).run(
            FetchQuery(sport=SportEnum.FOOTBALL), cycle_id=1
        ).events

    assert run(0.0, 0.1) == run(0.1, 0.0)


def test_adapter_exceptions_become_failures() -> None:
    fine = StaticAdapter("espn", 2, events=_espn_fixtures())

    result = _controller([ExplodingAdapter(), fine], min_events_single=1).run(
        FetchQuery(sport=SportEnum.FOOTBALL), cycle_id=1
    )

    assert len(result.events) == 5
    assert result.failures[0].provider_key == "broken"
    assert result.failures[0].kind == FetchErrorKind.MALFORMED_RESPONSE


def test_internal_errors_are_wrapped_as_cycle_failures() -> None:
    def broken_classifier(*args: object, **kwargs: object) -> object:
        raise RuntimeError("taxonomy bug")

    adapter = StaticAdapter("espn", 2, events=[_raw("espn", "Arsenal", "Chelsea")])
    controller = CascadeController(
        [adapter],
        policy=CascadePolicy(),
        synthetic=SyntheticGenerator(seed=1),
        classifier=broken_classifier,  # type: ignore[arg-type]
    )

    with pytest.raises(AggregationCycleFailure):
        controller.run(FetchQuery(), cycle_id=1)


def test_no_adapters_is_allowed_and_served_synthetically() -> None:
    result = _controller([]).run(FetchQuery(sport=SportEnum.TENNIS, is_live=False), cycle_id=1)
    assert result.authentic_count == 0
    assert result.synthetic_count == 4
    assert result.failures == []


def test_misconfigured_timing_is_rejected() -> None:
    with pytest.raises(AggregatorConfigError):
        _controller([], adapter_timeout_s=5.0, cycle_deadline_s=5.0)
    with pytest.raises(AggregatorConfigError):
        _controller([StaticAdapter("espn", 2), StaticAdapter("espn", 2)])
