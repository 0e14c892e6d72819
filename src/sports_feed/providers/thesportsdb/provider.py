from __future__ import annotations

from sports_feed.core.config import Settings
from sports_feed.domain.enums import ProviderEnum
from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.registry import AdapterRegistry
from sports_feed.providers.thesportsdb.adapter import TheSportsDbAdapter


def register_thesportsdb_adapter(registry: AdapterRegistry, *, settings: Settings) -> None:
    def make_adapter() -> TheSportsDbAdapter:
        http = BaseHttpClient(
            base_url=settings.thesportsdb_base_url, timeout_s=settings.adapter_timeout_s
        )
        return TheSportsDbAdapter(http=http, api_key=settings.thesportsdb_key)

    registry.register(ProviderEnum.THESPORTSDB.value, make_adapter)
