from __future__ import annotations

from sports_feed.core.config import Settings
from sports_feed.domain.enums import ProviderEnum
from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.registry import AdapterRegistry
from sports_feed.providers.espn.adapter import EspnAdapter


def register_espn_adapter(registry: AdapterRegistry, *, settings: Settings) -> None:
    def make_adapter() -> EspnAdapter:
        http = BaseHttpClient(
            base_url=settings.espn_base_url,
            timeout_s=settings.adapter_timeout_s,
            headers={"Accept": "application/json"},
        )
        return EspnAdapter(http=http)

    registry.register(ProviderEnum.ESPN.value, make_adapter)
