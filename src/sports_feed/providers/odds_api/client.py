from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sports_feed.providers.base.client import BaseHttpClient
from sports_feed.providers.base.errors import ProviderResponseError

ApiItem = dict[str, Any]


class OddsApiClient:
    def __init__(self, *, http: BaseHttpClient, api_key: str) -> None:
        self.http = http
        self.api_key = api_key

    def get_odds(
        self,
        *,
        sport_key: str,
        regions: str,
        markets: Sequence[str] = ("h2h",),
        odds_format: str = "decimal",
        bookmakers: Sequence[str] | None = None,
    ) -> list[ApiItem]:
        """Current odds for upcoming/live events.

        `sport_key="upcoming"` returns the next events across all sports.
        """

        params: dict[str, str] = {
            "apiKey": self.api_key,
            "regions": regions,
            "markets": ",".join(markets),
            "oddsFormat": odds_format,
            "dateFormat": "iso",
        }
        if bookmakers:
            params["bookmakers"] = ",".join(bookmakers)

        value = self.http.get_json_value(f"/sports/{sport_key}/odds", params=params)
        if not isinstance(value, list):
            raise ProviderResponseError(f"Expected list response, got {type(value)}")

        items: list[ApiItem] = []
        for v in value:
            if isinstance(v, dict):
                items.append(v)
        return items

    def close(self) -> None:
        self.http.close()
