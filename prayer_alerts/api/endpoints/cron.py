"""
Cron trigger endpoints for manual testing and external schedulers.
"""
from fastapi import APIRouter, HTTPException, Query, Request
from prayer_alerts.services.prayer_times_service import TimeSourceUnavailable
from prayer_alerts.utils.messages import MSG

router = APIRouter()


@router.post("/trigger")
def trigger(
    request: Request,
    type: str = Query(..., description="Trigger type: 'rollover' or 'rearm'")
):
    """
    Manually trigger scheduling work.

    - `rollover`: Fetch today's prayer times and re-arm alerts
    - `rearm`: Re-arm alerts against the prayer times already loaded
    """
    state = request.app.state
    engine = state.engine

    if type == "rollover":
        try:
            engine.refresh_from_source(state.time_source, state.location)
        except TimeSourceUnavailable as e:
            raise HTTPException(status_code=503, detail=MSG.TIME_SOURCE_UNAVAILABLE.format(error=e))
        return {"status": "ok", "type": "rollover", "armed": len(engine.pending_alerts())}

    elif type == "rearm":
        engine.arm(engine.current_events)
        return {"status": "ok", "type": "rearm", "armed": len(engine.pending_alerts())}

    else:
        return {"status": "error", "message": MSG.UNKNOWN_TRIGGER.format(type=type)}


@router.get("/status")
def scheduler_status(request: Request):
    """Get engine state, armed alerts and scheduler jobs."""
    engine = request.app.state.engine
    scheduler = request.app.state.scheduler

    jobs = []
    for job in scheduler.get_jobs():
        # Jobs added before the scheduler starts have no next_run_time yet
        next_run = getattr(job, "next_run_time", None)
        jobs.append({
            "id": job.id,
            "next_run": str(next_run) if next_run else None
        })

    return {
        "running": scheduler.running,
        "state": engine.state.value,
        "alerts": [
            {"event": a.event_name, "fire_at": a.fire_at.isoformat(), "handle": a.handle}
            for a in engine.pending_alerts()
        ],
        "jobs": jobs
    }
