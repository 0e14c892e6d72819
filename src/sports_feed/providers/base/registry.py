from __future__ import annotations

from typing import Callable

from .adapter import SourceAdapter
from .errors import ProviderCapabilityError

AdapterFactory = Callable[[], SourceAdapter]


class AdapterRegistry:
    """Ordered provider_key -> factory mapping; order is the cascade's merge order."""

    def __init__(self) -> None:
        self._factories: dict[str, AdapterFactory] = {}

    def register(self, provider_key: str, factory: AdapterFactory) -> None:
        if provider_key in self._factories:
            raise ValueError(f"Duplicate adapter registration: {provider_key}")
        self._factories[provider_key] = factory

    def keys(self) -> list[str]:
        return list(self._factories)

    def get(self, provider_key: str) -> SourceAdapter:
        factory = self._factories.get(provider_key)
        if factory is None:
            raise ProviderCapabilityError(f"No adapter registered for provider={provider_key}")
        return factory()

    def build_all(self) -> list[SourceAdapter]:
        return [factory() for factory in self._factories.values()]
