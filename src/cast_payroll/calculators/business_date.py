"""Business date resolution with a configurable day-switch hour."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

DEFAULT_DAY_SWITCH_HOUR = 5
DEFAULT_TIMEZONE = "Asia/Tokyo"

WEEKDAY_LABELS = ("月", "火", "水", "木", "金", "土", "日")  # Monday first, as date.weekday()


def parse_day_switch_hour(value: str | None, default: int = DEFAULT_DAY_SWITCH_HOUR) -> int:
    """Parse the hour part of an "HH:MM" or "HH:MM:SS" day-switch time.

    Anything unparseable or outside 0-23 yields ``default``.
    """
    if not value:
        return default
    head = str(value).strip().split(":")[0]
    try:
        hour = int(head)
    except ValueError:
        return default
    if not 0 <= hour <= 23:
        return default
    return hour


class BusinessDateResolver:
    """Maps wall-clock timestamps to business dates.

    A business day starts at ``day_switch_hour`` local time rather than at
    midnight: an event at 03:00 with a switch hour of 5 belongs to the
    previous calendar date. Naive timestamps are taken to be UTC.
    """

    def __init__(
        self,
        day_switch_hour: int = DEFAULT_DAY_SWITCH_HOUR,
        tz: tzinfo | str = DEFAULT_TIMEZONE,
    ):
        self.day_switch_hour = day_switch_hour
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    @classmethod
    def from_switch_time(
        cls, day_switch_time: str | None, tz: tzinfo | str = DEFAULT_TIMEZONE
    ) -> BusinessDateResolver:
        """Build a resolver from a store's "HH:MM" setting."""
        return cls(parse_day_switch_hour(day_switch_time), tz)

    def to_local(self, timestamp: datetime) -> datetime:
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp.astimezone(self.tz)

    def resolve(self, timestamp: datetime) -> date:
        """Return the business date ``timestamp`` belongs to."""
        local = self.to_local(timestamp)
        if local.hour < self.day_switch_hour:
            return local.date() - timedelta(days=1)
        return local.date()

    def calendar_date(self, timestamp: datetime) -> date:
        """Return the plain local calendar date of ``timestamp``."""
        return self.to_local(timestamp).date()

    def format_time(self, timestamp: datetime) -> str:
        """Format ``timestamp`` as local "HH:MM"."""
        return self.to_local(timestamp).strftime("%H:%M")

    @staticmethod
    def label(business_date: date) -> str:
        """Display label such as "3/14 (土)"."""
        weekday = WEEKDAY_LABELS[business_date.weekday()]
        return f"{business_date.month}/{business_date.day} ({weekday})"
