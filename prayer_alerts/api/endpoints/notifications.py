"""
Prayer notification settings and countdown endpoints.
"""
import logging
from fastapi import APIRouter, HTTPException, Request
from prayer_alerts.models.settings import NotificationSettings
from prayer_alerts.services.storage_service import PersistenceError
from prayer_alerts.utils.messages import MSG

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/settings")
def get_settings(request: Request):
    """Current notification settings."""
    return request.app.state.engine.get_settings().model_dump()


@router.put("/settings")
def update_settings(settings: NotificationSettings, request: Request):
    """
    Save settings and re-arm alerts.

    Turning notifications on also checks delivery permission once.
    """
    engine = request.app.state.engine
    was_enabled = engine.get_settings().enabled

    try:
        engine.update_settings(settings)
    except PersistenceError as e:
        logger.error(f"Failed to save notification settings: {e}")
        raise HTTPException(status_code=503, detail=MSG.SETTINGS_NOT_SAVED.format(error=e))

    response = {"settings": settings.model_dump(), "armed": len(engine.pending_alerts())}
    if settings.enabled and not was_enabled:
        granted = request.app.state.delivery.request_permission()
        response["permission_granted"] = granted
        response["message"] = MSG.PERMISSION_GRANTED if granted else MSG.PERMISSION_DENIED
    return response


@router.post("/permission")
def request_permission(request: Request):
    """Check whether alerts can be shown."""
    return {"granted": request.app.state.delivery.request_permission()}


@router.get("/next")
def next_prayer(request: Request):
    """Countdown to the next prayer."""
    countdown = request.app.state.countdown.refresh()
    if countdown is None:
        raise HTTPException(status_code=404, detail=MSG.NO_EVENTS_LOADED)

    return {
        "name": countdown.name,
        "time": countdown.time.to_string(),
        "minutes_until": countdown.minutes_until,
        "countdown": countdown.text,
    }
