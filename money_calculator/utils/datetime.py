"""Shared datetime helpers and clocks."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current UTC datetime."""

    return datetime.now(UTC)


def zone_clock(timezone_name: str | None) -> Clock:
    """Build a clock returning aware datetimes in the named IANA timezone.

    The calendar date of the returned values follows the zone, so a cache
    driven by this clock rolls over at the zone's midnight.

    Raises:
        ValueError: If the timezone name is unknown.
    """

    name = (timezone_name or "UTC").strip() or "UTC"
    if name.upper() == "UTC":
        return utc_now
    try:
        zone = ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown timezone '{name}'") from exc

    def _now() -> datetime:
        return datetime.now(zone)

    return _now
