from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from sports_feed.classification.classifier import SportClassification, classify
from sports_feed.classification.taxonomy import is_draw_eligible
from sports_feed.domain.enums import LIVE_STATUSES, ProviderEnum
from sports_feed.domain.event import Event, EventValidationError, Provenance
from sports_feed.providers.base.types import FetchQuery, RawEvent

logger = logging.getLogger(__name__)

Classifier = Callable[..., SportClassification]


def build_event(raw: RawEvent, classification: SportClassification, *, trust_tier: int) -> Event:
    """RawEvent + classification -> canonical Event (raises EventValidationError)."""

    sport = classification.sport
    odds = raw.odds
    if odds is not None and odds.draw is not None and not is_draw_eligible(sport):
        odds = odds.without_draw()

    return Event(
        event_id=f"{raw.provider_key}:{raw.provider_event_id}",
        sport=sport,
        league=raw.league.strip(),
        home=raw.home.strip(),
        away=raw.away.strip(),
        start_time=raw.start_time,
        # Status is the source of truth for liveness.
        is_live=raw.status in LIVE_STATUSES,
        status=raw.status,
        provenance=Provenance(provider_key=raw.provider_key, trust_tier=trust_tier),
        fetched_at=raw.fetched_at,
        score=raw.score,
        odds=odds,
        synthetic=raw.provider_key == ProviderEnum.SYNTHETIC.value,
        sport_confident=classification.confident,
    )


def classify_raw(raw: RawEvent, classifier: Classifier = classify) -> SportClassification:
    return classifier(
        raw.sport_label,
        raw.provider_key,
        league=raw.league,
        participants=(raw.home, raw.away),
    )


def normalize_batch(
    raws: Iterable[RawEvent],
    *,
    trust_tier: int,
    query: FetchQuery,
    classifier: Classifier = classify,
) -> list[Event]:
    """Classify + build Events for one adapter's records, keeping those matching the query."""

    events: list[Event] = []
    invalid = 0
    provider_key = None
    for raw in raws:
        provider_key = raw.provider_key
        classification = classify_raw(raw, classifier)
        if query.sport is not None and classification.sport != query.sport:
            continue
        try:
            event = build_event(raw, classification, trust_tier=trust_tier)
        except EventValidationError as exc:
            invalid += 1
            logger.debug("Dropping invalid event from %s: %s", raw.provider_key, exc)
            continue
        if query.is_live is not None and event.is_live != query.is_live:
            continue
        events.append(event)

    if invalid:
        logger.info("Dropped %d invalid event(s) from %s", invalid, provider_key)
    return events
