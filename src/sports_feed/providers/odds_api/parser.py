from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sports_feed.core.text import normalize_participant
from sports_feed.domain.event import Odds, parse_decimal_odds

ApiItem = dict[str, Any]

DRAW_NAMES = frozenset({"draw", "tie", "x"})


@dataclass(frozen=True)
class BestPrices:
    home: Decimal | None
    away: Decimal | None
    draw: Decimal | None
    bookmakers_seen: int

    def to_odds(self) -> Odds | None:
        if self.home is None or self.away is None:
            return None
        return Odds(home=self.home, away=self.away, draw=self.draw)


def _better(current: Decimal | None, candidate: Decimal | None) -> Decimal | None:
    if candidate is None:
        return current
    if current is None or candidate > current:
        return candidate
    return current


def parse_best_h2h_prices(event_item: ApiItem) -> BestPrices:
    """Best decimal h2h price per side across all bookmakers of one Odds API event.

    Outcomes are matched to sides by normalized team name; prices below 1.01
    (or non-numeric) are ignored.
    """

    home_team = event_item.get("home_team")
    away_team = event_item.get("away_team")
    if not isinstance(home_team, str) or not isinstance(away_team, str):
        return BestPrices(None, None, None, 0)

    home_norm = normalize_participant(home_team)
    away_norm = normalize_participant(away_team)

    bookmakers = event_item.get("bookmakers")
    if not isinstance(bookmakers, list):
        return BestPrices(None, None, None, 0)

    best_home: Decimal | None = None
    best_away: Decimal | None = None
    best_draw: Decimal | None = None
    seen = 0

    for book in bookmakers:
        if not isinstance(book, dict):
            continue

        markets = book.get("markets")
        if not isinstance(markets, list):
            continue

        for market in markets:
            if not isinstance(market, dict) or market.get("key") != "h2h":
                continue

            outcomes = market.get("outcomes")
            if not isinstance(outcomes, list):
                continue

            seen += 1
            for outcome in outcomes:
                if not isinstance(outcome, dict):
                    continue
                name = outcome.get("name")
                if not isinstance(name, str):
                    continue
                price = parse_decimal_odds(outcome.get("price"))

                n = normalize_participant(name)
                if n == home_norm:
                    best_home = _better(best_home, price)
                elif n == away_norm:
                    best_away = _better(best_away, price)
                elif n in DRAW_NAMES:
                    best_draw = _better(best_draw, price)

    return BestPrices(best_home, best_away, best_draw, seen)
