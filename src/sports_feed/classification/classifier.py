from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from sports_feed.classification.taxonomy import ALIAS_INDEX, ANY_PROVIDER, normalize_alias
from sports_feed.core.text import contains_keyword
from sports_feed.domain.enums import DEFAULT_SPORT, SportEnum

logger = logging.getLogger(__name__)


class UnknownSportError(ValueError):
    """A user-supplied sport filter matched no taxonomy entry."""


class MatchedBy(StrEnum):
    PROVIDER_ALIAS = "provider_alias"
    ALIAS = "alias"
    LEAGUE_KEYWORD = "league_keyword"
    PARTICIPANT_KEYWORD = "participant_keyword"
    DEFAULT = "default"


@dataclass(frozen=True)
class SportClassification:
    sport: SportEnum
    confident: bool
    matched_by: MatchedBy


# Evaluated top to bottom; first hit wins. More specific leagues come before
# generic ones ("rugby premiership" must not reach "premier league").
LEAGUE_KEYWORDS: tuple[tuple[str, SportEnum], ...] = (
    ("nfl", SportEnum.AMERICAN_FOOTBALL),
    ("ncaaf", SportEnum.AMERICAN_FOOTBALL),
    ("college football", SportEnum.AMERICAN_FOOTBALL),
    ("super bowl", SportEnum.AMERICAN_FOOTBALL),
    ("nba", SportEnum.BASKETBALL),
    ("wnba", SportEnum.BASKETBALL),
    ("ncaab", SportEnum.BASKETBALL),
    ("euroleague", SportEnum.BASKETBALL),
    ("college basketball", SportEnum.BASKETBALL),
    ("nhl", SportEnum.ICE_HOCKEY),
    ("khl", SportEnum.ICE_HOCKEY),
    ("ahl", SportEnum.ICE_HOCKEY),
    ("stanley cup", SportEnum.ICE_HOCKEY),
    ("mlb", SportEnum.BASEBALL),
    ("world series", SportEnum.BASEBALL),
    ("npb", SportEnum.BASEBALL),
    ("kbo", SportEnum.BASEBALL),
    ("atp", SportEnum.TENNIS),
    ("wta", SportEnum.TENNIS),
    ("itf", SportEnum.TENNIS),
    ("wimbledon", SportEnum.TENNIS),
    ("roland garros", SportEnum.TENNIS),
    ("davis cup", SportEnum.TENNIS),
    ("ufc", SportEnum.MMA),
    ("bellator", SportEnum.MMA),
    ("pfl", SportEnum.MMA),
    ("wbc", SportEnum.BOXING),
    ("wba", SportEnum.BOXING),
    ("ibf", SportEnum.BOXING),
    ("wbo", SportEnum.BOXING),
    ("ipl", SportEnum.CRICKET),
    ("t20", SportEnum.CRICKET),
    ("odi", SportEnum.CRICKET),
    ("test cricket", SportEnum.CRICKET),
    ("big bash", SportEnum.CRICKET),
    ("the hundred", SportEnum.CRICKET),
    ("six nations", SportEnum.RUGBY),
    ("super rugby", SportEnum.RUGBY),
    ("nrl", SportEnum.RUGBY),
    ("rugby", SportEnum.RUGBY),
    ("premier league", SportEnum.FOOTBALL),
    ("la liga", SportEnum.FOOTBALL),
    ("serie a", SportEnum.FOOTBALL),
    ("bundesliga", SportEnum.FOOTBALL),
    ("ligue 1", SportEnum.FOOTBALL),
    ("eredivisie", SportEnum.FOOTBALL),
    ("champions league", SportEnum.FOOTBALL),
    ("europa league", SportEnum.FOOTBALL),
    ("fa cup", SportEnum.FOOTBALL),
    ("mls", SportEnum.FOOTBALL),
)

PARTICIPANT_KEYWORDS: tuple[tuple[str, SportEnum], ...] = (
    ("all blacks", SportEnum.RUGBY),
    ("springboks", SportEnum.RUGBY),
    ("wallabies", SportEnum.RUGBY),
    ("maple leafs", SportEnum.ICE_HOCKEY),
    ("red wings", SportEnum.ICE_HOCKEY),
    ("bruins", SportEnum.ICE_HOCKEY),
    ("oilers", SportEnum.ICE_HOCKEY),
    ("lakers", SportEnum.BASKETBALL),
    ("celtics", SportEnum.BASKETBALL),
    ("knicks", SportEnum.BASKETBALL),
    ("76ers", SportEnum.BASKETBALL),
    ("yankees", SportEnum.BASEBALL),
    ("dodgers", SportEnum.BASEBALL),
    ("red sox", SportEnum.BASEBALL),
    ("cowboys", SportEnum.AMERICAN_FOOTBALL),
    ("patriots", SportEnum.AMERICAN_FOOTBALL),
    ("fc", SportEnum.FOOTBALL),
    ("afc", SportEnum.FOOTBALL),
    ("cf", SportEnum.FOOTBALL),
)


def classify(
    raw_label: str | int | None,
    provider_key: str,
    *,
    league: str | None = None,
    participants: Sequence[str] = (),
) -> SportClassification:
    """
    Map a provider's sport label (plus optional context) to a canonical sport.

    Order: provider alias, any-provider alias, league keywords, participant
    keywords, default sport (low confidence). Pure: no I/O, no randomness.
    """

    if raw_label is not None and not isinstance(raw_label, bool):
        label = normalize_alias(raw_label)
        if label:
            sport = ALIAS_INDEX.get((provider_key, label))
            if sport is not None:
                return SportClassification(sport, True, MatchedBy.PROVIDER_ALIAS)

            sport = ALIAS_INDEX.get((ANY_PROVIDER, label))
            if sport is not None:
                return SportClassification(sport, True, MatchedBy.ALIAS)

    if league:
        for keyword, sport in LEAGUE_KEYWORDS:
            if contains_keyword(league, keyword):
                return SportClassification(sport, True, MatchedBy.LEAGUE_KEYWORD)

    for keyword, sport in PARTICIPANT_KEYWORDS:
        for name in participants:
            if contains_keyword(name, keyword):
                return SportClassification(sport, True, MatchedBy.PARTICIPANT_KEYWORD)

    logger.warning(
        "ClassificationAmbiguous: label=%r provider=%s league=%r -> default %s",
        raw_label,
        provider_key,
        league,
        DEFAULT_SPORT.value,
    )
    return SportClassification(DEFAULT_SPORT, False, MatchedBy.DEFAULT)


def sport_for_id(value: str) -> SportEnum:
    """Resolve a user-supplied sport filter (canonical value or any alias)."""

    label = normalize_alias(value)
    for sport in SportEnum:
        if sport.value == label:
            return sport
    sport = ALIAS_INDEX.get((ANY_PROVIDER, label))
    if sport is None:
        raise UnknownSportError(f"Unknown sport: {value!r}")
    return sport
