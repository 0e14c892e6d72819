from __future__ import annotations

from sports_feed.core.config import Settings
from sports_feed.domain.enums import ProviderEnum
from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.registry import AdapterRegistry
from sports_feed.providers.odds_api.adapter import OddsApiAdapter
from sports_feed.providers.odds_api.client import OddsApiClient


def register_odds_api_adapter(registry: AdapterRegistry, *, settings: Settings) -> None:
    api_key = settings.require_odds_api_key()

    def make_adapter() -> OddsApiAdapter:
        http = BaseHttpClient(
            base_url=settings.odds_api_base_url, timeout_s=settings.adapter_timeout_s
        )
        return OddsApiAdapter(
            client=OddsApiClient(http=http, api_key=api_key),
            regions=settings.odds_api_regions,
        )

    registry.register(ProviderEnum.ODDS_API.value, make_adapter)
