import logging
import math
from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%b %d, %Y %H:%M %Z"


def format_downtime(started_at: datetime, now: datetime | None = None) -> str:
    current = now or datetime.now(UTC)
    minutes = (current - started_at).total_seconds() / 60
    if minutes < 1:
        return "less than a minute"
    if minutes > 60:
        return f"{math.floor(minutes / 60)} hours {math.floor(minutes % 60)} minutes"
    return f"{math.ceil(minutes)} minutes"


def format_date_in_timezones(date: datetime, timezones: list[str]) -> list[str]:
    zones: list[ZoneInfo] = []
    for name in timezones:
        try:
            zones.append(ZoneInfo(name))
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Ignoring unknown timezone %r", name)
    if not zones:
        zones = [ZoneInfo("UTC")]

    aware = date if date.tzinfo is not None else date.replace(tzinfo=UTC)
    return [aware.astimezone(zone).strftime(DATE_FORMAT) for zone in zones]


def format_date_in_timezones_html(date: datetime, timezones: list[str]) -> str:
    return "<br/>".join(format_date_in_timezones(date, timezones))
