# reconciler/core/__init__.py

from .errors import ReconcilerError, ConfigurationError, InvariantViolation, ChainReadError
from .logging import ReconcilerLogger, LoggingMixin, log_with_context
from .config import load_config, load_database_config
