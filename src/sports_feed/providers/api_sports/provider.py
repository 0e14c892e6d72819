from __future__ import annotations

from sports_feed.core.config import Settings
from sports_feed.domain.enums import ProviderEnum
from sports_feed.providers.api_sports.adapter import API_SPORTS_SPORTS, ApiSportsAdapter
from sports_feed.providers.api_sports.client import ApiSportsClient
from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.registry import AdapterRegistry


def register_api_sports_adapter(registry: AdapterRegistry, *, settings: Settings) -> None:
    api_key = settings.require_api_sports_key()

    def make_adapter() -> ApiSportsAdapter:
        clients = {
            s.sport: ApiSportsClient(
                http=BaseHttpClient(
                    base_url=settings.api_sports_host_template.format(host=s.host),
                    timeout_s=settings.adapter_timeout_s,
                ),
                api_key=api_key,
            )
            for s in API_SPORTS_SPORTS
        }
        return ApiSportsAdapter(clients=clients)

    registry.register(ProviderEnum.API_SPORTS.value, make_adapter)
