# api/routers/rewards.py

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from reconciler.core.logging import log_with_context, INFO, ERROR
from reconciler.services.runtime import ReconcilerRuntime
from reconciler.types import Skipped, NoChange, Initialized
from ..dependencies import get_runtime, get_logger

router = APIRouter()


@router.post("/refresh")
def refresh_rewards(
    runtime: ReconcilerRuntime = Depends(get_runtime),
    logger = Depends(get_logger)
):
    """Run one reward reconciliation pass and report what changed"""
    try:
        result = runtime.refresh_rewards()
    except Exception as e:
        log_with_context(logger, ERROR, "Error refreshing rewards",
                         error=str(e), exception_type=type(e).__name__)
        return JSONResponse(status_code=500, content={"error": "Failed to refresh rewards"})

    body = result.to_response()

    if isinstance(result, Skipped):
        body["error"] = "Reward refresh already in progress"
        return JSONResponse(status_code=409, content=body)

    if isinstance(result, NoChange):
        body["message"] = "No new rewards detected."
        return JSONResponse(status_code=200, content=body)

    if isinstance(result, Initialized):
        body["message"] = "Initialized validator rewards dataset."
        log_with_context(logger, INFO, "Reward dataset initialized via API",
                         epoch=result.epoch, amount=str(result.amount))
        return JSONResponse(status_code=201, content=body)

    log_with_context(logger, INFO, "New reward recorded via API",
                     epoch=result.epoch, amount=str(result.amount))
    return JSONResponse(status_code=200, content=body)
