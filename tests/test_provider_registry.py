from __future__ import annotations

import pytest

from sports_feed.core.config import Settings
from sports_feed.domain.enums import SportEnum
from sports_feed.providers.base.errors import ProviderCapabilityError
from sports_feed.providers.base.registry import AdapterRegistry
from sports_feed.providers.base.types import FetchQuery, FetchResult
from sports_feed.providers.defaults import build_default_registry


class _StaticAdapter:
    trust_tier = 1

    def __init__(self, key: str) -> None:
        self.provider_key = key

    def fetch(self, query: FetchQuery) -> FetchResult:
        return FetchResult(provider_key=self.provider_key)


def test_registry_keeps_registration_order() -> None:
    registry = AdapterRegistry()
    registry.register("b", lambda: _StaticAdapter("b"))
    registry.register("a", lambda: _StaticAdapter("a"))

    assert registry.keys() == ["b", "a"]
    assert [a.provider_key for a in registry.build_all()] == ["b", "a"]


def test_registry_rejects_duplicates_and_unknown_keys() -> None:
    registry = AdapterRegistry()
    registry.register("espn", lambda: _StaticAdapter("espn"))

    with pytest.raises(ValueError):
        registry.register("espn", lambda: _StaticAdapter("espn"))
    with pytest.raises(ProviderCapabilityError):
        registry.get("nope")

    adapter = registry.get("espn")
    assert adapter.fetch(FetchQuery(sport=SportEnum.TENNIS)).ok


def test_default_registry_skips_paid_providers_without_keys() -> None:
    s = Settings(_env_file=None, api_sports_key=None, odds_api_key=None)

    assert build_default_registry(s).keys() == ["espn", "thesportsdb", "sofascore"]


def test_default_registry_puts_paid_providers_first() -> None:
    s = Settings(_env_file=None, api_sports_key="k1", odds_api_key="k2")

    keys = build_default_registry(s).keys()

    assert keys == ["api_sports", "odds_api", "espn", "thesportsdb", "sofascore"]
