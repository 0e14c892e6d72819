from __future__ import annotations

from sports_feed.core.config import Settings
from sports_feed.domain.enums import ProviderEnum
from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.registry import AdapterRegistry
from sports_feed.providers.sofascore.adapter import BROWSER_HEADERS, SofaScoreAdapter


def register_sofascore_adapter(registry: AdapterRegistry, *, settings: Settings) -> None:
    def make_adapter() -> SofaScoreAdapter:
        http = BaseHttpClient(
            base_url=settings.sofascore_base_url,
            timeout_s=settings.adapter_timeout_s,
            headers=BROWSER_HEADERS,
        )
        return SofaScoreAdapter(http=http)

    registry.register(ProviderEnum.SOFASCORE.value, make_adapter)
