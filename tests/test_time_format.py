from datetime import UTC, datetime, timedelta

from oneuptime.core.time_format import (
    format_date_in_timezones,
    format_date_in_timezones_html,
    format_downtime,
)

START = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)


def test_format_downtime_ranges() -> None:
    assert format_downtime(START, START + timedelta(seconds=30)) == "less than a minute"
    assert format_downtime(START, START + timedelta(minutes=4, seconds=10)) == "5 minutes"
    assert format_downtime(START, START + timedelta(minutes=60)) == "60 minutes"
    assert format_downtime(START, START + timedelta(minutes=135)) == "2 hours 15 minutes"


def test_format_date_in_timezones_uses_each_zone() -> None:
    formatted = format_date_in_timezones(START, ["UTC", "America/New_York"])

    assert formatted == ["Oct 19, 2026 08:00 UTC", "Oct 19, 2026 04:00 EDT"]


def test_unknown_timezones_fall_back_to_utc() -> None:
    assert format_date_in_timezones(START, ["Mars/Olympus"]) == ["Oct 19, 2026 08:00 UTC"]
    assert format_date_in_timezones(START.replace(tzinfo=None), []) == ["Oct 19, 2026 08:00 UTC"]


def test_format_date_in_timezones_html_joins_lines() -> None:
    html = format_date_in_timezones_html(START, ["UTC", "Asia/Kolkata"])

    assert html == "Oct 19, 2026 08:00 UTC<br/>Oct 19, 2026 13:30 IST"
