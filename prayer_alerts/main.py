import asyncio
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from prayer_alerts.api.endpoints import notifications, cron
from prayer_alerts.db.session import SessionLocal
from prayer_alerts.services.countdown_service import LiveCountdown
from prayer_alerts.services.notification_service import TelegramDelivery
from prayer_alerts.services.prayer_times_service import AladhanTimeSource, Location, TimeSourceUnavailable
from prayer_alerts.services.scheduler_service import (
    SchedulingEngine,
    build_scheduler,
    start_scheduler,
    stop_scheduler,
)
from prayer_alerts.services.storage_service import build_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the scheduling engine, load today's prayers, start/stop scheduler."""
    scheduler = build_scheduler()
    delivery = TelegramDelivery()
    engine = SchedulingEngine(scheduler, build_store(SessionLocal), delivery)
    countdown = LiveCountdown(lambda: engine.current_events, engine.now)
    time_source = AladhanTimeSource()
    location = Location()

    app.state.scheduler = scheduler
    app.state.engine = engine
    app.state.delivery = delivery
    app.state.countdown = countdown
    app.state.time_source = time_source
    app.state.location = location

    engine.restore()
    try:
        await asyncio.to_thread(engine.refresh_from_source, time_source, location)
    except TimeSourceUnavailable as e:
        logger.error(f"Starting without prayer times, alerts disarmed: {e}")

    countdown.start(scheduler)
    start_scheduler(scheduler, engine, time_source, location)
    yield
    countdown.stop(scheduler)
    stop_scheduler(scheduler)


app = FastAPI(title="Prayer Alerts API", version="0.1.0", lifespan=lifespan)

@app.get("/")
async def root():
    return {"message": "Prayer Alerts API is online 🕌"}

@app.get("/health")
async def health():
    return {"status": "healthy"}

# Include routers
app.include_router(notifications.router, prefix="/api/v1/notifications", tags=["notifications"])
app.include_router(cron.router, prefix="/api/v1/cron", tags=["cron"])
