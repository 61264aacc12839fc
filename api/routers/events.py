# api/routers/events.py

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from reconciler.core.logging import log_with_context, ERROR
from reconciler.services.runtime import ReconcilerRuntime
from ..dependencies import get_runtime, get_logger

router = APIRouter()


@router.post("/refresh")
def refresh_events(
    runtime: ReconcilerRuntime = Depends(get_runtime),
    logger = Depends(get_logger)
):
    """Sync contract logs up to the current head"""
    try:
        result = runtime.refresh_events()
    except Exception as e:
        log_with_context(logger, ERROR, "Error refreshing events",
                         error=str(e), exception_type=type(e).__name__)
        return JSONResponse(status_code=500, content={"error": "Failed to refresh events"})

    body = result.to_response()
    if result.skipped:
        body["error"] = "Event sync already in progress"
        return JSONResponse(status_code=409, content=body)

    return JSONResponse(status_code=200, content=body)
