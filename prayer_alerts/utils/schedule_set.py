"""Derive alert fire times from a day's events and a lead time."""
from dataclasses import dataclass

from prayer_alerts.utils.clock import MINUTES_PER_DAY, ClockTime


@dataclass(frozen=True)
class FireTime:
    """When to alert for an event. day_offset -1 means the previous day."""

    name: str
    time: ClockTime
    day_offset: int = 0


def compute_fire_times(events, enabled, lead_minutes: int) -> list[FireTime]:
    """Offset each enabled event backwards by `lead_minutes`."""
    if not 0 <= lead_minutes < MINUTES_PER_DAY:
        raise ValueError(f"Lead time out of range: {lead_minutes}")

    fire_times = []
    for event in events:
        if event.name not in enabled:
            continue
        minutes = event.time.minutes - lead_minutes
        day_offset = 0
        if minutes < 0:
            minutes += MINUTES_PER_DAY
            day_offset = -1
        fire_times.append(FireTime(event.name, ClockTime(minutes), day_offset))
    return fire_times
