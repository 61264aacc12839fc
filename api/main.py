# api/main.py

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reconciler import create_reconciler
from reconciler.core.logging import ReconcilerLogger, log_with_context, INFO, ERROR
from reconciler.services.runtime import ReconcilerRuntime

from .routers import rewards, events
from .dependencies import set_dependencies, clear_dependencies, get_optional_runtime


def create_app(runtime: Optional[ReconcilerRuntime] = None, start_schedules: bool = True) -> FastAPI:
    """
    Build the API app.

    Without a runtime one is created from the environment at startup. The
    schedules start with the app and stop when it shuts down.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = ReconcilerLogger.get_logger('api.main')
        active = runtime

        try:
            if active is None:
                active = create_reconciler()
            set_dependencies(active)
            if start_schedules:
                active.start()
        except Exception as e:
            log_with_context(logger, ERROR, "Failed to initialize API",
                             error=str(e), exception_type=type(e).__name__)
            raise

        log_with_context(logger, INFO, "API startup completed")

        yield

        logger.info("API shutting down")
        if start_schedules:
            active.stop()
        clear_dependencies()

    app = FastAPI(
        title="Validator Reward Reconciler API",
        description="Manual refresh and health endpoints for the reconciler",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(rewards.router, prefix="/rewards", tags=["rewards"])
    app.include_router(events.router, prefix="/events", tags=["events"])

    @app.get("/health")
    def health_check(active: Optional[ReconcilerRuntime] = Depends(get_optional_runtime)):
        if active is None:
            return {"status": "starting", "database_connected": False, "schedulers": {}}

        return {
            "status": "healthy",
            "message": "Reconciler API is running",
            "database_connected": active.db_manager.health_check(),
            "schedulers": {
                s.job.name: {"state": s.state.value, "failures": s.failure_count}
                for s in active.schedulers
            },
        }

    if runtime is not None:
        set_dependencies(runtime)

    return app


app = create_app()
