from __future__ import annotations

import logging

from sports_feed.core.config import Settings
from sports_feed.providers.api_sports.provider import register_api_sports_adapter
from sports_feed.providers.base.registry import AdapterRegistry
from sports_feed.providers.espn.provider import register_espn_adapter
from sports_feed.providers.odds_api.provider import register_odds_api_adapter
from sports_feed.providers.sofascore.provider import register_sofascore_adapter
from sports_feed.providers.thesportsdb.provider import register_thesportsdb_adapter

logger = logging.getLogger(__name__)


def build_default_registry(settings: Settings) -> AdapterRegistry:
    """Register every provider the settings allow, most trusted first.

    Paid providers are skipped (not failed) when their key is missing.
    """

    registry = AdapterRegistry()

    if settings.api_sports_key:
        register_api_sports_adapter(registry, settings=settings)
    else:
        logger.info("API_SPORTS_KEY not set; api_sports adapter disabled")

    if settings.odds_api_key:
        register_odds_api_adapter(registry, settings=settings)
    else:
        logger.info("ODDS_API_KEY not set; odds_api adapter disabled")

    register_espn_adapter(registry, settings=settings)
    register_thesportsdb_adapter(registry, settings=settings)
    register_sofascore_adapter(registry, settings=settings)
    return registry
