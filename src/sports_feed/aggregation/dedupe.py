from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

from sports_feed.classification.taxonomy import is_draw_eligible
from sports_feed.core.text import normalize_participant
from sports_feed.domain.enums import EventStatusEnum
from sports_feed.domain.event import Event, Odds

DedupeKey = tuple[str, str, Any]


def contributor_rank(event: Event) -> tuple[bool, int, float, str, str]:
    """Lower sorts first: authentic before synthetic, trust tier, newest fetch, then ids."""

    return (
        event.synthetic,
        event.provenance.trust_tier,
        -event.fetched_at.timestamp(),
        event.provenance.provider_key,
        event.event_id,
    )


def event_sort_key(event: Event) -> tuple[bool, float, str, str, str, str]:
    """Output order: live first, then kickoff; the rest only makes ties deterministic."""

    return (
        not event.is_live,
        event.start_time.timestamp(),
        event.sport.value,
        normalize_participant(event.home),
        normalize_participant(event.away),
        event.event_id,
    )


def dedupe(events: Iterable[Event]) -> list[Event]:
    """
    Merge events describing the same fixture.

    Key is (home, away, sport) after trim/lower-case; exact match only. The
    best-ranked contributor supplies every attribute and the provenance;
    gaps on the winner are backfilled from the next-best contributor.
    """

    groups: dict[DedupeKey, list[Event]] = {}
    for event in events:
        groups.setdefault(event.dedupe_key, []).append(event)

    merged = [_merge(group) for group in groups.values()]
    merged.sort(key=event_sort_key)
    return merged


def _merge(group: Sequence[Event]) -> Event:
    ranked = sorted(group, key=contributor_rank)
    winner = ranked[0]
    if len(ranked) == 1:
        return winner

    # Synthetic and authentic fields never mix.
    donors = [e for e in ranked[1:] if e.synthetic == winner.synthetic]
    if not donors:
        return winner

    changes: dict[str, Any] = {}

    if winner.status not in (EventStatusEnum.SCHEDULED, EventStatusEnum.POSTPONED):
        peers = [
            e
            for e in ranked
            if e.synthetic == winner.synthetic
            and e.provenance.trust_tier == winner.provenance.trust_tier
            and e.score is not None
        ]
        # ranked is newest-first within a tier, so peers[0] is the freshest score.
        source = peers[0] if peers else next((e for e in donors if e.score is not None), None)
        if source is not None and source.score != winner.score:
            changes["score"] = source.score

    if winner.odds is None:
        source = next((e for e in donors if e.odds is not None), None)
        if source is not None and source.odds is not None:
            odds = source.odds
            if odds.draw is not None and not is_draw_eligible(winner.sport):
                odds = odds.without_draw()
            changes["odds"] = odds
    elif winner.odds.draw is None and is_draw_eligible(winner.sport):
        draw = next(
            (e.odds.draw for e in donors if e.odds is not None and e.odds.draw is not None), None
        )
        if draw is not None:
            changes["odds"] = Odds(home=winner.odds.home, away=winner.odds.away, draw=draw)

    if not winner.league:
        league = next((e.league for e in donors if e.league), "")
        if league:
            changes["league"] = league

    return replace(winner, **changes) if changes else winner
