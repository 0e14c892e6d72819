from __future__ import annotations

from enum import Enum, StrEnum


class ProviderEnum(StrEnum):
    API_SPORTS = "api_sports"
    ODDS_API = "odds_api"
    ESPN = "espn"
    THESPORTSDB = "thesportsdb"
    SOFASCORE = "sofascore"
    SYNTHETIC = "synthetic"


class SportEnum(str, Enum):
    FOOTBALL = "football"
    BASKETBALL = "basketball"
    TENNIS = "tennis"
    BASEBALL = "baseball"
    ICE_HOCKEY = "ice_hockey"
    AMERICAN_FOOTBALL = "american_football"
    RUGBY = "rugby"
    CRICKET = "cricket"
    MMA = "mma"
    BOXING = "boxing"


DEFAULT_SPORT = SportEnum.FOOTBALL


class EventStatusEnum(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    HALF_TIME = "HALF_TIME"
    FINISHED = "FINISHED"
    POSTPONED = "POSTPONED"


LIVE_STATUSES = frozenset({EventStatusEnum.IN_PROGRESS, EventStatusEnum.HALF_TIME})
NOT_LIVE_STATUSES = frozenset(
    {EventStatusEnum.SCHEDULED, EventStatusEnum.POSTPONED, EventStatusEnum.FINISHED}
)


class FetchErrorKind(StrEnum):
    TIMEOUT = "timeout"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    UNREACHABLE = "unreachable"
    MALFORMED_RESPONSE = "malformed_response"
