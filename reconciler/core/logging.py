# reconciler/core/logging.py
"""
Centralized logging for the reconciler.

Provides:
- ReconcilerLogger: Global logging configuration
- LoggingMixin: Consistent logging behavior for classes
- Utility functions: Context logging helpers
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime

from logging import DEBUG, INFO, WARNING, ERROR, CRITICAL


class ReconcilerFormatter(logging.Formatter):
    CONTEXT_ATTRS = (
        'job', 'origin', 'operator', 'epoch', 'from_block', 'to_block',
        'block_number', 'tx_hash', 'log_index', 'contract_address', 'count',
        'strategy', 'error', 'exception_type',
    )

    def __init__(self, include_context: bool = False):
        self.include_context = include_context
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        base_msg = f"{timestamp} - {record.name} - {record.levelname} - {record.getMessage()}"

        if not self.include_context:
            return base_msg

        context_parts = [
            f"{attr}={getattr(record, attr)}"
            for attr in self.CONTEXT_ATTRS
            if hasattr(record, attr)
        ]

        if context_parts:
            base_msg = f"{base_msg} | {' '.join(context_parts)}"

        if record.exc_info:
            base_msg = f"{base_msg}\n{self.formatException(record.exc_info)}"

        return base_msg


class ReconcilerLogger:
    """Global logging configuration and management"""

    _configured = False
    _log_dir: Optional[Path] = None
    _log_level = logging.INFO

    @classmethod
    def configure(cls,
                  log_dir: Optional[Path] = None,
                  log_level: str = "INFO",
                  console_enabled: bool = True,
                  file_enabled: bool = True,
                  structured_format: bool = True,
                  force: bool = False) -> None:

        if cls._configured and not force:
            return

        cls._log_dir = log_dir
        cls._log_level = getattr(logging, log_level.upper(), logging.INFO)

        if file_enabled and log_dir:
            log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger('reconciler')
        root_logger.setLevel(cls._log_level)

        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        if console_enabled:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(cls._log_level)

            if structured_format:
                console_formatter = ReconcilerFormatter(include_context=True)
            else:
                console_formatter = logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
                )
            console_handler.setFormatter(console_formatter)
            root_logger.addHandler(console_handler)

        if file_enabled and log_dir:
            file_formatter = ReconcilerFormatter(include_context=True)

            file_handler = logging.FileHandler(log_dir / 'reconciler.log')
            file_handler.setLevel(cls._log_level)
            file_handler.setFormatter(file_formatter)
            root_logger.addHandler(file_handler)

            error_handler = logging.FileHandler(log_dir / 'reconciler_errors.log')
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(file_formatter)
            root_logger.addHandler(error_handler)

        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not name.startswith('reconciler'):
            name = f'reconciler.{name}'

        return logging.getLogger(name)


# === Utility Functions ===

def get_class_logger(cls_instance) -> logging.Logger:
    module = cls_instance.__class__.__module__
    class_name = cls_instance.__class__.__name__

    if module.startswith('reconciler.'):
        module = module[len('reconciler.'):]

    return ReconcilerLogger.get_logger(f"{module}.{class_name}")


def log_with_context(logger: logging.Logger, level: int, message: str,
                     exc_info=None, **context) -> None:
    if logger.isEnabledFor(level):
        record = logger.makeRecord(
            logger.name, level, "", 0, message, (), exc_info
        )
        for key, value in context.items():
            setattr(record, key, value)
        logger.handle(record)


# === LoggingMixin for Classes ===

class LoggingMixin:
    """Mixin to add consistent, context-aware logging to any class"""

    @property
    def logger(self) -> logging.Logger:
        if not hasattr(self, '_logger'):
            self._logger = get_class_logger(self)
        return self._logger

    def log_debug(self, message: str, **context) -> None:
        log_with_context(self.logger, DEBUG, message, **context)

    def log_info(self, message: str, **context) -> None:
        log_with_context(self.logger, INFO, message, **context)

    def log_warning(self, message: str, **context) -> None:
        log_with_context(self.logger, WARNING, message, **context)

    def log_error(self, message: str, **context) -> None:
        log_with_context(self.logger, ERROR, message, **context)


__all__ = [
    'ReconcilerFormatter',
    'ReconcilerLogger',
    'LoggingMixin',
    'get_class_logger',
    'log_with_context',
    'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL',
]
