from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def parse_iso_z(value: str) -> datetime:
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    dt = datetime.fromisoformat(v)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _from_timestamp(value: int | float) -> datetime:
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Timestamp out of range: {value!r}") from e


def parse_provider_datetime(value: Any) -> datetime:
    """
    Parse the start-time shapes providers send into tz-aware UTC datetime.

    Supports:
      - ISO string: "2025-09-07T20:20:00Z" / "+00:00" / "2025-09-07T20:20Z"
      - Unix timestamp (int/float seconds)
      - Dict (api-sports):
        {"timezone":"UTC","date":"YYYY-MM-DD","time":"HH:MM","timestamp": 123}
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid datetime value: {value!r}")

    if isinstance(value, int | float):
        return _from_timestamp(value)

    if isinstance(value, dict):
        ts = value.get("timestamp")
        if isinstance(ts, int):
            return _from_timestamp(ts)

        date_part = value.get("date")
        time_part = value.get("time") or "00:00"
        if not isinstance(date_part, str) or not isinstance(time_part, str):
            raise ValueError(f"Missing/invalid date dict: {value!r}")

        # Treat as UTC; timestamp is preferred when present.
        return parse_iso_z(f"{date_part[:10]}T{time_part[:5]}:00+00:00")

    if isinstance(value, str) and value.strip():
        v = value.strip()
        # ESPN omits seconds ("2025-09-07T20:20Z").
        if len(v) == 17 and v.endswith("Z"):
            v = v[:-1] + ":00Z"
        return parse_iso_z(v)

    raise ValueError(f"Missing/invalid datetime value: {value!r}")


def iso_z(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC).replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")
