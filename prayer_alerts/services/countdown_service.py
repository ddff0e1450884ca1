"""Live "next prayer" countdown, recomputed on a fixed tick."""
import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError

from prayer_alerts.utils.clock import ClockTime
from prayer_alerts.utils.next_occurrence import format_countdown, next_occurrence

logger = logging.getLogger(__name__)

COUNTDOWN_TICK_SECONDS = int(os.getenv("COUNTDOWN_TICK_SECONDS", "1"))
COUNTDOWN_JOB_ID = "live_countdown"


@dataclass(frozen=True)
class Countdown:
    name: str
    time: ClockTime
    minutes_until: int
    text: str


class LiveCountdown:
    """
    Tracks the next prayer for display.

    Reads events through `events_provider` (the scheduling engine's
    canonical set) so the countdown and the armed alerts never disagree.
    Refreshing never arms or disarms anything.
    """

    def __init__(self, events_provider: Callable, now_provider: Callable, tick_seconds: int = COUNTDOWN_TICK_SECONDS):
        self._events_provider = events_provider
        self._now_provider = now_provider
        self._tick_seconds = tick_seconds
        self._current: Optional[Countdown] = None

    @property
    def current(self) -> Optional[Countdown]:
        return self._current

    def refresh(self) -> Optional[Countdown]:
        events = self._events_provider()
        if not events:
            self._current = None
            return None

        now = ClockTime.from_datetime(self._now_provider())
        occurrence = next_occurrence(now, events)
        self._current = Countdown(
            name=occurrence.event.name,
            time=occurrence.event.time,
            minutes_until=occurrence.minutes_until,
            text=format_countdown(occurrence.minutes_until),
        )
        return self._current

    def start(self, scheduler):
        scheduler.add_job(
            self.refresh,
            "interval",
            seconds=self._tick_seconds,
            id=COUNTDOWN_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.info(f"Countdown ticking every {self._tick_seconds}s")

    def stop(self, scheduler):
        try:
            scheduler.remove_job(COUNTDOWN_JOB_ID)
        except JobLookupError:
            pass
