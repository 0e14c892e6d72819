from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # api-sports
    api_sports_key: str | None = Field(default=None, repr=False)
    api_sports_host_template: str = "https://{host}.api-sports.io"

    # odds-api
    odds_api_key: str | None = Field(default=None, repr=False)
    odds_api_base_url: str = "https://api.the-odds-api.com/v4"
    odds_api_regions: str = "eu"

    # free / scraped sources
    espn_base_url: str = "https://site.api.espn.com/apis/site/v2/sports"
    thesportsdb_key: str = Field(default="3", repr=False)
    thesportsdb_base_url: str = "https://www.thesportsdb.com/api/v1/json"
    sofascore_base_url: str = "https://api.sofascore.com/api/v1"

    # Cycle timing (seconds). adapter < cycle deadline < shortest cache TTL.
    adapter_timeout_s: float = 6.0
    cycle_deadline_s: float = 10.0
    live_ttl_s: float = 30.0
    upcoming_ttl_s: float = 300.0
    stale_grace_s: float = 600.0
    max_workers: int = 8

    # Quality gate / synthetic fallback
    min_events_all: int = 10
    min_events_single: int = 3
    synthetic_target_per_sport: int = 8
    synthetic_seed: int | None = None

    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_timing(self) -> Settings:
        if not 0 < self.adapter_timeout_s < self.cycle_deadline_s:
            raise ValueError("adapter_timeout_s must be positive and below cycle_deadline_s")
        if self.cycle_deadline_s >= min(self.live_ttl_s, self.upcoming_ttl_s):
            raise ValueError("cycle_deadline_s must be below both cache TTLs")
        return self

    # -----------------------------
    # Required-key helpers
    # -----------------------------

    def require_api_sports_key(self) -> str:
        if not self.api_sports_key:
            raise RuntimeError("API_SPORTS_KEY is not set. Set it in the environment or .env file.")
        return self.api_sports_key

    def require_odds_api_key(self) -> str:
        if not self.odds_api_key:
            raise RuntimeError("ODDS_API_KEY is not set. Set it in the environment or .env file.")
        return self.odds_api_key


settings = Settings()
