"""Find the next upcoming event in a daily timeline."""
from dataclasses import dataclass

from prayer_alerts.utils.clock import MINUTES_PER_DAY, ClockTime, NamedEvent


class EmptyEventSet(ValueError):
    """Raised when asked for the next event of an empty day."""


@dataclass(frozen=True)
class Occurrence:
    event: NamedEvent
    minutes_until: int


def next_occurrence(now: ClockTime, events) -> Occurrence:
    """
    Return the first event strictly after `now`.

    An event at exactly `now` counts as already past. When nothing is
    left today, wraps to the first event of tomorrow.
    """
    ordered = sorted(events, key=lambda e: e.time)
    if not ordered:
        raise EmptyEventSet("No events to pick the next occurrence from")

    for event in ordered:
        if event.time.minutes > now.minutes:
            return Occurrence(event, event.time.minutes - now.minutes)

    first = ordered[0]
    return Occurrence(first, (MINUTES_PER_DAY - now.minutes) + first.time.minutes)


def format_countdown(minutes_until: int) -> str:
    """Render minutes as "{hours}h {minutes}m"."""
    hours, minutes = divmod(minutes_until, 60)
    return f"{hours}h {minutes}m"
