"""
Scheduler service for prayer alerts.

Features:
- One single-shot APScheduler job per enabled prayer, N minutes before it
- Armed job ids persisted so a restart can cancel stale alerts
- Explicit daily rollover job that reloads prayer times and re-arms
"""
import enum
import json
import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

from apscheduler.events import EVENT_JOB_MISSED
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from pydantic import ValidationError

from prayer_alerts.models.settings import NotificationSettings
from prayer_alerts.services.notification_service import DeliveryUnsupported
from prayer_alerts.services.prayer_times_service import TimeSourceUnavailable
from prayer_alerts.services.storage_service import ARMED_KEY, SETTINGS_KEY, PersistenceError
from prayer_alerts.utils.clock import ClockTime, NamedEvent, sort_events
from prayer_alerts.utils.messages import MSG
from prayer_alerts.utils.next_occurrence import Occurrence, next_occurrence
from prayer_alerts.utils.schedule_set import compute_fire_times

logger = logging.getLogger(__name__)

# Configuration
TIMEZONE = os.getenv("TIMEZONE", "Asia/Tehran")
ROLLOVER_HOUR = int(os.getenv("ROLLOVER_HOUR", "0"))
ROLLOVER_MINUTE = int(os.getenv("ROLLOVER_MINUTE", "5"))
MISFIRE_GRACE_SECONDS = int(os.getenv("MISFIRE_GRACE_SECONDS", "60"))

ROLLOVER_JOB_ID = "daily_rollover"


class EngineState(enum.Enum):
    DISARMED = "disarmed"
    ARMED = "armed"


@dataclass(frozen=True)
class PendingAlert:
    event_name: str
    fire_at: datetime
    handle: str


class SchedulingEngine:
    """
    Owns the armed set of prayer alerts for one user session.

    Every arm() disarms first, so there is never more than one pending
    alert per prayer. The handle list in the store mirrors the in-memory
    armed set after every arm(), disarm() and firing.
    """

    def __init__(
        self,
        scheduler,
        store,
        delivery,
        timezone: str = TIMEZONE,
        now_provider: Optional[Callable[[], datetime]] = None,
        misfire_grace_seconds: int = MISFIRE_GRACE_SECONDS,
    ):
        self._scheduler = scheduler
        self._store = store
        self._delivery = delivery
        self._tz = ZoneInfo(timezone)
        self._now_provider = now_provider or (lambda: datetime.now(self._tz))
        self._misfire_grace_seconds = misfire_grace_seconds
        self._lock = threading.RLock()
        self._settings = NotificationSettings()
        self._events: list[NamedEvent] = []
        self._armed: dict[str, PendingAlert] = {}
        scheduler.add_listener(self._on_job_missed, EVENT_JOB_MISSED)

    # ---------- read side ----------

    def now(self) -> datetime:
        return self._now_provider()

    @property
    def state(self) -> EngineState:
        with self._lock:
            return EngineState.ARMED if self._armed else EngineState.DISARMED

    @property
    def current_events(self) -> list[NamedEvent]:
        with self._lock:
            return list(self._events)

    def get_settings(self) -> NotificationSettings:
        with self._lock:
            return self._settings.model_copy(deep=True)

    def pending_alerts(self) -> list[PendingAlert]:
        with self._lock:
            return sorted(self._armed.values(), key=lambda a: a.fire_at)

    def next_event(self, now: Optional[ClockTime] = None) -> Occurrence:
        if now is None:
            now = ClockTime.from_datetime(self.now())
        return next_occurrence(now, self.current_events)

    # ---------- persistence ----------

    def _read(self, key: str) -> Optional[bytes]:
        try:
            return self._store.get(key)
        except PersistenceError as e:
            logger.warning(f"[Scheduler] Could not read {key}, using defaults: {e}")
            return None

    def _persist_armed(self):
        self._store.set(ARMED_KEY, json.dumps(list(self._armed)).encode("utf-8"))

    def restore(self):
        """Load settings and cancel any handles left over from a previous run."""
        with self._lock:
            raw = self._read(SETTINGS_KEY)
            if raw:
                try:
                    self._settings = NotificationSettings.from_bytes(raw)
                except ValidationError as e:
                    logger.warning(f"[Scheduler] Stored settings invalid, using defaults: {e}")

            stale = []
            raw = self._read(ARMED_KEY)
            if raw:
                try:
                    stale = list(json.loads(raw))
                except ValueError as e:
                    logger.warning(f"[Scheduler] Stored alert handles unreadable: {e}")

            for handle in stale:
                self._cancel(handle)
            self._armed = {}
            self._persist_armed()
            if stale:
                logger.info(f"[Scheduler] Cancelled {len(stale)} stale alerts from previous run")

    # ---------- arm / disarm ----------

    def _cancel(self, handle: str):
        try:
            self._scheduler.remove_job(handle)
        except JobLookupError:
            pass  # already fired or cancelled

    def disarm(self):
        """Cancel every armed alert. Safe to call at any time."""
        with self._lock:
            for handle in list(self._armed):
                self._cancel(handle)
            count = len(self._armed)
            self._armed = {}
            self._persist_armed()
            if count:
                logger.info(f"[Scheduler] Disarmed {count} alerts")

    def arm(self, events, settings: Optional[NotificationSettings] = None):
        """Replace the armed set with one alert per enabled event."""
        with self._lock:
            self._events = sort_events(events)
            if settings is None:
                settings = self._settings
            self.disarm()

            if not settings.enabled:
                logger.info("[Scheduler] Notifications disabled, nothing armed")
                return

            fire_times = compute_fire_times(
                self._events, settings.enabled_names(self._events), settings.lead_minutes
            )
            now = self.now()
            midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
            times_by_name = {event.name: event.time for event in self._events}

            armed = {}
            try:
                for fire in fire_times:
                    fire_at = midnight + timedelta(days=fire.day_offset, minutes=fire.time.minutes)
                    # Lead window already passed: alert for the next occurrence instead
                    while fire_at <= now:
                        fire_at += timedelta(days=1)

                    handle = f"prayer-alert-{fire.name.lower()}-{uuid4().hex[:8]}"
                    self._scheduler.add_job(
                        self._fire,
                        trigger=DateTrigger(run_date=fire_at),
                        id=handle,
                        args=[handle, fire.name, times_by_name[fire.name].to_string(), not settings.sound],
                        misfire_grace_time=self._misfire_grace_seconds,
                        coalesce=True,
                        max_instances=1,
                    )
                    armed[handle] = PendingAlert(fire.name, fire_at, handle)

                self._armed = armed
                self._persist_armed()
            except Exception:
                for handle in armed:
                    self._cancel(handle)
                self._armed = {}
                raise

            for alert in self.pending_alerts():
                logger.info(f"[Scheduler] Armed {alert.event_name} alert at {alert.fire_at}")

    def roll_to_next_day(self, events):
        """Swap in a new day's events and re-arm with the current settings."""
        logger.info("[Scheduler] Rolling over to a new day's prayer times")
        self.arm(events)

    def refresh_from_source(self, time_source, location):
        """
        Fetch today's events and re-arm.

        If the source is down, disarms and forgets the old events so the
        countdown stops showing stale times.
        """
        try:
            events = time_source.fetch_daily_events(location)
        except TimeSourceUnavailable:
            with self._lock:
                self._events = []
                self.disarm()
            raise
        self.roll_to_next_day(events)

    def update_settings(self, settings: NotificationSettings):
        """Persist new settings and re-arm against the current events."""
        with self._lock:
            self._store.set(SETTINGS_KEY, settings.to_bytes())
            self._settings = settings.model_copy(deep=True)
            self.arm(self._events, self._settings)

    # ---------- firing ----------

    def _on_job_missed(self, event):
        """APScheduler drops jobs missed past the grace time without running them."""
        with self._lock:
            if event.job_id not in self._armed:
                return
            alert = self._armed.pop(event.job_id)
            logger.warning(f"[Scheduler] {alert.event_name} alert missed its fire time ({alert.fire_at})")
            self._persist_armed()

    def _fire(self, handle: str, event_name: str, display_time: str, silent: bool = False):
        with self._lock:
            if handle not in self._armed:
                logger.info(f"[Scheduler] Ignoring superseded alert {handle}")
                return

            try:
                self._delivery.deliver(
                    MSG.ALERT_TITLE.format(name=event_name),
                    MSG.ALERT_BODY.format(time=display_time),
                    silent=silent,
                )
                logger.info(f"[Scheduler] Alert delivered for {event_name}")
            except DeliveryUnsupported as e:
                logger.warning(f"[Scheduler] Alert for {event_name} not shown: {e}")
            except Exception as e:
                logger.error(f"[Scheduler] Alert delivery error for {event_name}: {e}")

            del self._armed[handle]
            self._persist_armed()


def build_scheduler(timezone: str = TIMEZONE) -> AsyncIOScheduler:
    return AsyncIOScheduler(timezone=timezone)


def start_scheduler(scheduler, engine: SchedulingEngine, time_source, location):
    """Register the daily rollover job and start the scheduler."""

    def rollover():
        try:
            engine.refresh_from_source(time_source, location)
        except TimeSourceUnavailable as e:
            logger.error(f"[Scheduler] Rollover failed, alerts disarmed: {e}")

    scheduler.add_job(
        rollover,
        CronTrigger(hour=ROLLOVER_HOUR, minute=ROLLOVER_MINUTE),
        id=ROLLOVER_JOB_ID,
        replace_existing=True,
        misfire_grace_time=MISFIRE_GRACE_SECONDS,
        coalesce=True,
    )

    scheduler.start()
    logger.info(f"[Scheduler] Started with daily rollover at {ROLLOVER_HOUR:02d}:{ROLLOVER_MINUTE:02d}")


def stop_scheduler(scheduler):
    """Gracefully stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("[Scheduler] Shutdown requested")
