"""Timezone-aware clocks for configured cities."""

import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from worldclock.core.validators import ValidationError, load_timezone

LOCALTIME_PATH = Path("/etc/localtime")


class Clock:
    """A world clock for a specific timezone."""

    def __init__(self, name: str, timezone: str):
        """Create a clock.

        Args:
            name: Display name of the city
            timezone: IANA timezone identifier

        Raises:
            ValidationError: If the timezone cannot be loaded
        """
        try:
            self.location = load_timezone(timezone)
        except ValidationError as e:
            raise ValidationError(f"failed to load timezone '{timezone}': {e}") from e
        self.name = name
        self.timezone = timezone

    def __repr__(self):
        return f"Clock({self.name!r}, {self.timezone!r})"

    def get_time(self, now: Optional[datetime] = None) -> datetime:
        """Return the current (or given) instant in the clock's timezone."""
        if now is None:
            return datetime.now(self.location)
        return now.astimezone(self.location)

    def format_time(self, now: Optional[datetime] = None) -> str:
        """Time in 24-hour format (HH:MM:SS)."""
        return self.get_time(now).strftime("%H:%M:%S")

    def format_date(self, now: Optional[datetime] = None) -> str:
        """Date in YYYY-MM-DD format."""
        return self.get_time(now).strftime("%Y-%m-%d")

    def utc_offset(self, now: Optional[datetime] = None) -> int:
        """UTC offset in seconds."""
        offset = self.get_time(now).utcoffset()
        return int(offset.total_seconds()) if offset is not None else 0

    def format_utc_offset(self, now: Optional[datetime] = None) -> str:
        """UTC offset in UTC±HH:MM format."""
        offset = self.utc_offset(now)
        sign = "+"
        if offset < 0:
            sign = "-"
            offset = -offset
        hours, rem = divmod(offset, 3600)
        minutes = rem // 60
        return f"UTC{sign}{hours:02d}:{minutes:02d}"

    def format_date_with_offset(self, now: Optional[datetime] = None) -> str:
        """Date and UTC offset, e.g. ``2026-10-18 - UTC+02:00``."""
        now = self.get_time(now)
        return f"{self.format_date(now)} - {self.format_utc_offset(now)}"


def sort_by_utc_offset(clocks: List[Clock], now: Optional[datetime] = None) -> List[Clock]:
    """Sort clocks in place by UTC offset (west to east). Ties keep their order."""
    now = now or datetime.now().astimezone()
    clocks.sort(key=lambda c: c.utc_offset(now))
    return clocks


def get_system_timezone() -> str:
    """Return the system's IANA timezone name, falling back to UTC."""
    tz_env = os.environ.get("TZ", "").lstrip(":")
    if tz_env:
        try:
            load_timezone(tz_env)
            return tz_env
        except ValidationError:
            pass

    # /etc/localtime is usually a symlink into the zoneinfo tree
    try:
        target = os.path.realpath(LOCALTIME_PATH)
    except OSError:
        target = ""
    marker = "zoneinfo" + os.sep
    if marker in target:
        name = target.split(marker, 1)[1]
        try:
            load_timezone(name)
            return name
        except ValidationError:
            pass

    return "UTC"
