# reconciler/core/errors.py


class ReconcilerError(Exception):
    """Base class for errors raised by the reconciler itself"""


class ConfigurationError(ReconcilerError, ValueError):
    """Missing or malformed configuration value"""

    def __init__(self, variable: str, message: str):
        self.variable = variable
        super().__init__(f"{variable}: {message}")


class InvariantViolation(ReconcilerError):
    """
    Stored or computed state broke an invariant the reconciler relies on.

    Raised before any partial write is committed so the tick can be
    retried safely once the cause is understood.
    """

    def __init__(self, message: str, **context):
        self.context = context
        super().__init__(message)


class ChainReadError(ReconcilerError):
    """The node returned a payload the reconciler could not interpret"""
