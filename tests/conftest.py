"""Shared test fixtures and configuration."""
import pytest
from datetime import datetime
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler

from prayer_alerts.utils.clock import ClockTime, NamedEvent

TZ = "Asia/Tehran"


@pytest.fixture(autouse=True)
def mock_env(monkeypatch):
    """Set minimum required environment variables for all tests."""
    monkeypatch.setenv("DATABASE_URL", "")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "test-bot-token")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "12345")
    monkeypatch.setenv("TIMEZONE", TZ)


@pytest.fixture
def events():
    """The five prayers from the reference scenario."""
    return [
        NamedEvent("Fajr", ClockTime.parse("05:30 AM")),
        NamedEvent("Dhuhr", ClockTime.parse("12:15 PM")),
        NamedEvent("Asr", ClockTime.parse("03:45 PM")),
        NamedEvent("Maghrib", ClockTime.parse("06:20 PM")),
        NamedEvent("Isha", ClockTime.parse("07:50 PM")),
    ]


class FakeClock:
    """Settable now() for the engine."""

    def __init__(self, hour=13, minute=0):
        self.value = datetime(2026, 10, 19, hour, minute, tzinfo=ZoneInfo(TZ))

    def __call__(self):
        return self.value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    """Never started: jobs stay pending and nothing fires on its own."""
    return BackgroundScheduler(timezone=TZ)
