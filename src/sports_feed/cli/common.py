from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from sports_feed.aggregation.facade import EventAggregator, build_default_aggregator
from sports_feed.classification.classifier import UnknownSportError, sport_for_id
from sports_feed.core.config import settings
from sports_feed.core.logging import setup_logging
from sports_feed.domain.enums import SportEnum


@contextmanager
def aggregator_scope() -> Iterator[EventAggregator]:
    """
    Context-managed aggregator for CLI commands.
    Ensures every adapter's HTTP client is closed.
    """
    setup_logging(settings.log_level)
    aggregator = build_default_aggregator(settings)
    try:
        yield aggregator
    finally:
        aggregator.close()


def parse_sport_option(value: str | None) -> SportEnum | None:
    if value is None:
        return None
    try:
        return sport_for_id(value)
    except UnknownSportError as exc:
        raise typer.BadParameter(str(exc), param_hint="--sport") from exc
