"""
Synthetic placeholder events.

Used only when authentic sources cannot fill a response. Every record carries
provenance `synthetic` (and therefore `Event.synthetic=True`); the generator
sits behind the same `fetch(query) -> FetchResult` interface as the adapters,
so its records go through the same classification and validation.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from sports_feed.classification.taxonomy import is_draw_eligible
from sports_feed.core.dates import utc_now
from sports_feed.core.text import normalize_participant
from sports_feed.domain.enums import EventStatusEnum, ProviderEnum, SportEnum
from sports_feed.domain.event import Odds, Score
from sports_feed.providers.base.types import FetchQuery, FetchResult, RawEvent

SYNTHETIC_TRUST_TIER = 99


@dataclass(frozen=True)
class SportProfile:
    participants: tuple[str, ...]
    leagues: tuple[str, ...]
    # Inclusive per-side score range for live events; None = no running score.
    score_range: tuple[int, int] | None
    has_half_time: bool = False


PROFILES: Mapping[SportEnum, SportProfile] = {
    SportEnum.FOOTBALL: SportProfile(
        participants=(
            "Manchester City", "Arsenal", "Liverpool", "Chelsea", "Tottenham",
            "Real Madrid", "Barcelona", "Atletico Madrid", "Bayern Munich",
            "Borussia Dortmund", "PSG", "Marseille", "AC Milan", "Inter Milan", "Juventus",
        ),
        leagues=(
            "Premier League", "La Liga", "Bundesliga", "Serie A", "Ligue 1", "Champions League",
        ),
        score_range=(0, 4),
        has_half_time=True,
    ),
    SportEnum.BASKETBALL: SportProfile(
        participants=(
            "Los Angeles Lakers", "Boston Celtics", "Golden State Warriors", "Miami Heat",
            "Denver Nuggets", "Milwaukee Bucks", "Phoenix Suns", "Philadelphia 76ers",
            "Brooklyn Nets", "Dallas Mavericks",
        ),
        leagues=("NBA", "EuroLeague"),
        score_range=(85, 120),
        has_half_time=True,
    ),
    SportEnum.TENNIS: SportProfile(
        participants=(
            "Novak Djokovic", "Carlos Alcaraz", "Daniil Medvedev", "Jannik Sinner",
            "Alexander Zverev", "Iga Swiatek", "Aryna Sabalenka", "Coco Gauff",
        ),
        leagues=("ATP Masters 1000", "WTA 1000", "ATP 500"),
        score_range=(0, 2),
    ),
    SportEnum.BASEBALL: SportProfile(
        participants=(
            "Los Angeles Dodgers", "New York Yankees", "Houston Astros", "Atlanta Braves",
            "Philadelphia Phillies", "San Diego Padres", "New York Mets", "Seattle Mariners",
        ),
        leagues=("MLB",),
        score_range=(0, 8),
    ),
    SportEnum.ICE_HOCKEY: SportProfile(
        participants=(
            "Edmonton Oilers", "Florida Panthers", "New York Rangers", "Dallas Stars",
            "Colorado Avalanche", "Boston Bruins", "Vegas Golden Knights", "Toronto Maple Leafs",
        ),
        leagues=("NHL", "KHL"),
        score_range=(0, 5),
    ),
    SportEnum.AMERICAN_FOOTBALL: SportProfile(
        participants=(
            "Kansas City Chiefs", "Philadelphia Eagles", "San Francisco 49ers", "Buffalo Bills",
            "Dallas Cowboys", "Baltimore Ravens", "Detroit Lions", "Green Bay Packers",
        ),
        leagues=("NFL",),
        score_range=(0, 35),
        has_half_time=True,
    ),
    SportEnum.RUGBY: SportProfile(
        participants=(
            "New Zealand", "South Africa", "England", "France", "Ireland", "Wales", "Australia",
        ),
        leagues=("Six Nations", "Rugby Championship"),
        score_range=(0, 35),
        has_half_time=True,
    ),
    SportEnum.CRICKET: SportProfile(
        participants=(
            "England", "Australia", "India", "Pakistan", "South Africa", "New Zealand", "Sri Lanka",
        ),
        leagues=("Test Cricket", "ODI Series", "T20 International"),
        score_range=(150, 300),
    ),
    SportEnum.MMA: SportProfile(
        participants=(
            "Islam Makhachev", "Jon Jones", "Alex Pereira", "Leon Edwards", "Sean O'Malley",
            "Ilia Topuria",
        ),
        leagues=("UFC",),
        score_range=None,
    ),
    SportEnum.BOXING: SportProfile(
        participants=(
            "Tyson Fury", "Anthony Joshua", "Oleksandr Usyk", "Deontay Wilder", "Canelo Alvarez",
            "Terence Crawford",
        ),
        leagues=("WBC", "WBA", "IBF", "WBO"),
        score_range=None,
    ),
}


def _price(rng: random.Random, low: float, high: float) -> Decimal:
    return Decimal(f"{rng.uniform(low, high):.2f}")


class SyntheticGenerator:
    provider_key = ProviderEnum.SYNTHETIC.value
    trust_tier = SYNTHETIC_TRUST_TIER

    def __init__(
        self,
        *,
        target_per_sport: int = 8,
        seed: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.target_per_sport = target_per_sport
        self._seed = seed
        self._clock = clock

    def fetch(
        self,
        query: FetchQuery,
        *,
        per_sport: Mapping[SportEnum, int] | None = None,
        taken: Collection[tuple[str, str, SportEnum]] = (),
    ) -> FetchResult:
        """
        Generate placeholder records.

        `per_sport` overrides how many to make per sport (default: target for the
        queried sport, or for every sport); `taken` lists dedupe keys that must
        not be reused, so padding never collides with authentic fixtures.
        """
        if per_sport is None:
            sports = [query.sport] if query.sport is not None else list(SportEnum)
            per_sport = {s: self.target_per_sport for s in sports}

        now = self._clock()
        blocked = set(taken)
        events: list[RawEvent] = []
        for sport, count in per_sport.items():
            if count <= 0:
                continue
            events.extend(self._generate(sport, count, query.is_live, now=now, blocked=blocked))
        return FetchResult(provider_key=self.provider_key, events=events)

    def _rng(self, sport: SportEnum, is_live: bool | None) -> random.Random:
        # One generator per call; concurrent cycles share no RNG state.
        if self._seed is None:
            return random.Random()
        return random.Random(f"{self._seed}:{sport.value}:{is_live}")

    def _generate(
        self,
        sport: SportEnum,
        count: int,
        is_live: bool | None,
        *,
        now: datetime,
        blocked: set[tuple[str, str, SportEnum]],
    ) -> list[RawEvent]:
        profile = PROFILES[sport]
        rng = self._rng(sport, is_live)

        pairs = [
            (h, a)
            for h in profile.participants
            for a in profile.participants
            if h != a
            and (normalize_participant(h), normalize_participant(a), sport) not in blocked
        ]
        rng.shuffle(pairs)

        # Prefer fixtures where nobody plays twice, then reuse names if still short.
        chosen: list[tuple[str, str]] = []
        used_names: set[str] = set()
        for home, away in pairs:
            if len(chosen) >= count:
                break
            if home in used_names or away in used_names:
                continue
            used_names.update((home, away))
            chosen.append((home, away))
        for pair in pairs:
            if len(chosen) >= count:
                break
            if pair not in chosen:
                chosen.append(pair)

        out: list[RawEvent] = []
        for home, away in chosen:
            blocked.add((normalize_participant(home), normalize_participant(away), sport))
            live = is_live if is_live is not None else rng.random() > 0.4
            out.append(self._make(sport, profile, rng, home, away, live, now=now, index=len(out)))
        return out

    def _make(
        self,
        sport: SportEnum,
        profile: SportProfile,
        rng: random.Random,
        home: str,
        away: str,
        live: bool,
        *,
        now: datetime,
        index: int,
    ) -> RawEvent:
        if live:
            status = (
                EventStatusEnum.HALF_TIME
                if profile.has_half_time and rng.random() < 0.15
                else EventStatusEnum.IN_PROGRESS
            )
            start_time = now - timedelta(minutes=rng.randint(1, 90))
            score = None
            if profile.score_range is not None:
                lo, hi = profile.score_range
                score = Score(home=rng.randint(lo, hi), away=rng.randint(lo, hi))
        else:
            status = EventStatusEnum.SCHEDULED
            start_time = now + timedelta(minutes=rng.randint(30, 7 * 24 * 60))
            score = None

        draw = _price(rng, 3.0, 4.5) if is_draw_eligible(sport) else None
        odds = Odds(home=_price(rng, 1.6, 4.0), away=_price(rng, 1.6, 4.0), draw=draw)

        return RawEvent(
            provider_key=self.provider_key,
            provider_event_id=f"{sport.value}-{'live' if live else 'upcoming'}-{index}",
            sport_label=sport.value,
            league=rng.choice(profile.leagues),
            home=home,
            away=away,
            start_time=start_time.replace(second=0, microsecond=0),
            is_live=live,
            status=status,
            fetched_at=now,
            score=score,
            odds=odds,
        )
