"""
Clock time handling for daily prayer schedules.

Times are stored as minutes since midnight (0-1439) and parsed from the
12-hour "HH:MM AM/PM" strings used throughout the app.
"""
import re
from dataclasses import dataclass
from datetime import datetime

MINUTES_PER_DAY = 24 * 60

_CLOCK_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")


class MalformedTime(ValueError):
    """Raised when a clock string is not a valid 12-hour time."""


@dataclass(frozen=True, order=True)
class ClockTime:
    """Minutes since midnight."""

    minutes: int

    def __post_init__(self):
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise MalformedTime(f"Minutes out of range: {self.minutes}")

    @classmethod
    def parse(cls, value: str) -> "ClockTime":
        """Parse "5:30 AM" / "05:30 PM" style strings."""
        match = _CLOCK_PATTERN.match(value or "")
        if not match:
            raise MalformedTime(f"Not a 12-hour clock time: {value!r}")

        hours, minutes = int(match.group(1)), int(match.group(2))
        period = match.group(3).upper()
        if not 1 <= hours <= 12:
            raise MalformedTime(f"Hour out of range in {value!r}")
        if not 0 <= minutes <= 59:
            raise MalformedTime(f"Minutes out of range in {value!r}")

        # 12 AM is midnight, 12 PM is noon
        hours %= 12
        if period == "PM":
            hours += 12
        return cls(hours * 60 + minutes)

    @classmethod
    def from_hm(cls, hour: int, minute: int) -> "ClockTime":
        """Build from 24-hour parts."""
        if not 0 <= hour <= 23 or not 0 <= minute <= 59:
            raise MalformedTime(f"Invalid 24-hour time: {hour}:{minute}")
        return cls(hour * 60 + minute)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "ClockTime":
        return cls(dt.hour * 60 + dt.minute)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def to_string(self) -> str:
        hour12 = self.hour % 12 or 12
        period = "AM" if self.hour < 12 else "PM"
        return f"{hour12:02d}:{self.minute:02d} {period}"

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class NamedEvent:
    """A named instant in the daily timeline, e.g. a prayer."""

    name: str
    time: ClockTime


def sort_events(events) -> list[NamedEvent]:
    """Order a day's events by time; names must be unique."""
    seen = set()
    for event in events:
        if event.name in seen:
            raise ValueError(f"Duplicate event name: {event.name}")
        seen.add(event.name)
    return sorted(events, key=lambda e: e.time)
