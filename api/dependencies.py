# api/dependencies.py

from fastapi import HTTPException

from reconciler.core.logging import ReconcilerLogger
from reconciler.services.runtime import ReconcilerRuntime

# Set during app startup
_runtime: ReconcilerRuntime = None
_logger = None


def set_dependencies(runtime: ReconcilerRuntime):
    """Called during app startup to set global dependencies"""
    global _runtime, _logger
    _runtime = runtime
    _logger = ReconcilerLogger.get_logger('api.dependencies')


def clear_dependencies():
    global _runtime
    _runtime = None


def get_runtime() -> ReconcilerRuntime:
    if _runtime is None:
        raise HTTPException(status_code=503, detail="Reconciler not initialized")
    return _runtime


def get_optional_runtime():
    return _runtime


def get_logger():
    if _logger is None:
        return ReconcilerLogger.get_logger('api.default')
    return _logger
