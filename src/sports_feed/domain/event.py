from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from sports_feed.classification.taxonomy import is_draw_eligible
from sports_feed.core.dates import iso_z
from sports_feed.core.text import normalize_participant
from sports_feed.domain.enums import (
    LIVE_STATUSES,
    NOT_LIVE_STATUSES,
    EventStatusEnum,
    ProviderEnum,
    SportEnum,
)

MIN_DECIMAL_ODDS = Decimal("1.01")
_CENT = Decimal("0.01")


class EventValidationError(ValueError):
    """A canonical Event (or one of its parts) would violate an invariant."""


def parse_decimal_odds(value: Any) -> Decimal | None:
    """
    Best-effort decimal price parser.

    Returns None (rejects) for anything non-numeric, non-finite, or below 1.01
    after rounding to cents.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    try:
        d = d.quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, OverflowError):
        # Too many digits for the decimal context (e.g. "1e30").
        return None
    if d < MIN_DECIMAL_ODDS:
        return None
    return d


@dataclass(frozen=True)
class Score:
    home: int
    away: int

    def __post_init__(self) -> None:
        for v in (self.home, self.away):
            if isinstance(v, bool) or not isinstance(v, int) or v < 0:
                raise EventValidationError(f"Score values must be non-negative ints, got {self!r}")

    @classmethod
    def parse(cls, home: Any, away: Any) -> Score | None:
        """Lenient constructor for provider payloads (numeric strings allowed)."""
        try:
            h = int(str(home).strip())
            a = int(str(away).strip())
        except (TypeError, ValueError):
            return None
        if h < 0 or a < 0:
            return None
        return cls(home=h, away=a)


@dataclass(frozen=True)
class Odds:
    home: Decimal
    away: Decimal
    draw: Decimal | None = None

    def __post_init__(self) -> None:
        for name in ("home", "away", "draw"):
            v = getattr(self, name)
            if v is None and name == "draw":
                continue
            if not isinstance(v, Decimal) or v < MIN_DECIMAL_ODDS:
                raise EventValidationError(f"Odds.{name} must be a Decimal >= 1.01, got {v!r}")

    def without_draw(self) -> Odds:
        return Odds(home=self.home, away=self.away)

    @classmethod
    def from_prices(cls, home: Any, away: Any, draw: Any = None) -> Odds | None:
        """
        Build odds from raw prices.

        Home/away are both required; an invalid draw price is dropped on its own.
        """
        h = parse_decimal_odds(home)
        a = parse_decimal_odds(away)
        if h is None or a is None:
            return None
        return cls(home=h, away=a, draw=parse_decimal_odds(draw))


@dataclass(frozen=True)
class Provenance:
    provider_key: str
    trust_tier: int


@dataclass(frozen=True)
class Event:
    event_id: str
    sport: SportEnum
    league: str
    home: str
    away: str
    start_time: datetime
    is_live: bool
    status: EventStatusEnum
    provenance: Provenance
    fetched_at: datetime
    score: Score | None = None
    odds: Odds | None = None
    synthetic: bool = False
    sport_confident: bool = True

    def __post_init__(self) -> None:
        if not self.home.strip() or not self.away.strip():
            raise EventValidationError(f"Event {self.event_id} is missing a participant")
        if normalize_participant(self.home) == normalize_participant(self.away):
            raise EventValidationError(
                f"Event {self.event_id} has identical participants: {self.home!r}"
            )
        if self.start_time.tzinfo is None:
            raise EventValidationError(f"Event {self.event_id} start_time must be tz-aware")

        if self.is_live and self.status not in LIVE_STATUSES:
            raise EventValidationError(
                f"Live event {self.event_id} cannot have status {self.status.value}"
            )
        if not self.is_live and self.status not in NOT_LIVE_STATUSES:
            raise EventValidationError(
                f"Non-live event {self.event_id} cannot have status {self.status.value}"
            )

        if (
            self.odds is not None
            and self.odds.draw is not None
            and not is_draw_eligible(self.sport)
        ):
            raise EventValidationError(
                f"Event {self.event_id}: draw price on non-draw sport {self.sport.value}"
            )

        synthetic_source = self.provenance.provider_key == ProviderEnum.SYNTHETIC.value
        if self.synthetic != synthetic_source:
            raise EventValidationError(
                f"Event {self.event_id}: synthetic flag does not match provenance "
                f"{self.provenance.provider_key}"
            )

    @property
    def dedupe_key(self) -> tuple[str, str, SportEnum]:
        return (normalize_participant(self.home), normalize_participant(self.away), self.sport)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.event_id,
            "sport": self.sport.value,
            "league": self.league,
            "home": self.home,
            "away": self.away,
            "start_time": iso_z(self.start_time),
            "is_live": self.is_live,
            "status": self.status.value,
            "score": (
                None if self.score is None else {"home": self.score.home, "away": self.score.away}
            ),
            "odds": (
                None
                if self.odds is None
                else {
                    "home": str(self.odds.home),
                    "away": str(self.odds.away),
                    "draw": None if self.odds.draw is None else str(self.odds.draw),
                }
            ),
            "source": self.provenance.provider_key,
            "trust_tier": self.provenance.trust_tier,
            "synthetic": self.synthetic,
            "sport_confident": self.sport_confident,
            "fetched_at": iso_z(self.fetched_at),
        }
