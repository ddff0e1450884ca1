"""
Prayer times source.

Fetches today's timings from the Aladhan API. Method 0 is
Shia Ithna-Ashari (Ja'fari).
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import httpx

from prayer_alerts.utils.clock import ClockTime, MalformedTime, NamedEvent, sort_events

logger = logging.getLogger(__name__)

ALADHAN_URL = os.getenv("ALADHAN_URL", "https://api.aladhan.com/v1/timingsByCity")
PRAYER_NAMES = ("Fajr", "Dhuhr", "Asr", "Maghrib", "Isha")


class TimeSourceUnavailable(RuntimeError):
    """Raised when today's prayer times cannot be fetched."""


@dataclass
class Location:
    city: str = field(default_factory=lambda: os.getenv("PRAYER_CITY", "Qom"))
    country: str = field(default_factory=lambda: os.getenv("PRAYER_COUNTRY", "Iran"))
    method: int = field(default_factory=lambda: int(os.getenv("PRAYER_METHOD", "0")))


def parse_timing(value: str) -> ClockTime:
    """Parse an Aladhan "HH:MM" timing, ignoring a trailing "(TZ)" label."""
    raw = value.split("(")[0].strip()
    try:
        hours, minutes = (int(part) for part in raw.split(":"))
    except ValueError:
        raise MalformedTime(f"Not a 24-hour timing: {value!r}")
    return ClockTime.from_hm(hours, minutes)


class AladhanTimeSource:
    """Time source backed by api.aladhan.com."""

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = 15.0):
        self._client = client
        self._timeout = timeout

    def fetch_daily_events(self, location: Location) -> list[NamedEvent]:
        params = {
            "city": location.city,
            "country": location.country,
            "method": location.method,
        }
        try:
            if self._client is not None:
                resp = self._client.get(ALADHAN_URL, params=params, timeout=self._timeout)
            else:
                with httpx.Client() as client:
                    resp = client.get(ALADHAN_URL, params=params, timeout=self._timeout)
            resp.raise_for_status()
            timings = resp.json()["data"]["timings"]
            events = [NamedEvent(name, parse_timing(timings[name])) for name in PRAYER_NAMES]
        except httpx.HTTPError as e:
            raise TimeSourceUnavailable(f"Aladhan request failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise TimeSourceUnavailable(f"Unexpected Aladhan response: {e}") from e

        logger.info(
            f"Fetched prayer times for {location.city}, {location.country}: "
            + ", ".join(f"{e.name} {e.time}" for e in events)
        )
        return sort_events(events)
