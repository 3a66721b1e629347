"""
sourcespell Logging & Errors Module
===================================
Structured logging and the exception hierarchy shared by all modules.

Logging is configured from the environment:
- SOURCESPELL_LOG_LEVEL  (default WARNING)
- SOURCESPELL_LOG_FORMAT (text or json, default text)
- SOURCESPELL_LOG_FILE   (optional rotating log file)

Log records always go to stderr so that they never mix with the report,
which is written to stdout.
"""

import os
import sys
import json
import logging
import time
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from dataclasses import dataclass
from contextlib import contextmanager

__version__ = "1.0.0"

LOG_FILE_MAX_BYTES = 1024 * 1024  # 1MB per log file
LOG_BACKUP_COUNT = 3

# Process exit status bits.
EXIT_SUCCESS = 0
EXIT_INTERNAL_ERROR = 1
EXIT_INVOCATION_ERROR = 2
EXIT_DIRECTIVE_ERROR = 4  # Reserved for linting directives.
EXIT_SPELLING_ERROR = 8

TEXT_LOG_FORMAT = '%(name)s: %(levelname)s: %(message)s'

# Attributes of every LogRecord; anything else was passed as context.
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {
    'message', 'asctime', 'taskName',
}


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

@dataclass
class LoggingConfig:
    """Logging configuration."""
    log_level: str = "WARNING"
    log_format: str = "text"  # Options: json, text
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        """Load logging configuration from environment variables."""
        env = os.environ
        return cls(
            log_level=env.get('SOURCESPELL_LOG_LEVEL', cls.log_level),
            log_format=env.get('SOURCESPELL_LOG_FORMAT', cls.log_format).lower(),
            log_file=env.get('SOURCESPELL_LOG_FILE') or None,
        )


_logging_config: Optional[LoggingConfig] = None


def get_logging_config() -> LoggingConfig:
    """Get or create the global logging configuration."""
    global _logging_config
    if _logging_config is None:
        _logging_config = LoggingConfig.from_env()
    return _logging_config


def context_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the context passed with a record."""
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRIBUTES}


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class JsonFormatter(logging.Formatter):
    """Formats a record and its context as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update(context_fields(record))
        if record.exc_info:
            entry['traceback'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Formats a record with its context appended as key=value pairs."""

    def __init__(self):
        super().__init__(TEXT_LOG_FORMAT)

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = context_fields(record)
        if context:
            line += ' (' + ' '.join(f'{k}={v}' for k, v in context.items()) + ')'
        return line


class StructuredLogger:
    """Logger taking keyword context with every message."""

    def __init__(self, name: str, config: Optional[LoggingConfig] = None):
        self.name = name
        self.config = config or get_logging_config()
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.WARNING))
        self.logger.handlers.clear()
        for handler in self._build_handlers():
            self.logger.addHandler(handler)

    def _build_handlers(self) -> List[logging.Handler]:
        formatter = JsonFormatter() if self.config.log_format == 'json' else TextFormatter()
        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        if self.config.log_file:
            handlers.append(RotatingFileHandler(
                self.config.log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8',
            ))
        for handler in handlers:
            handler.setFormatter(formatter)
        return handlers

    def log(self, level: int, message: str, exc_info: bool = False, **context):
        self.logger.log(level, message, exc_info=exc_info, extra=context)

    def debug(self, message: str, **context):
        self.log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self.log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self.log(logging.WARNING, message, **context)

    def error(self, message: str, exc_info: bool = False, **context):
        self.log(logging.ERROR, message, exc_info=exc_info, **context)

    def exception(self, message: str, **context):
        """Log an error with the traceback of the exception being handled."""
        self.error(message, exc_info=True, **context)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """
        Time a setup phase.

        The start is logged at debug level, completion at info level and
        failure at error level; exceptions are re-raised.
        """
        started = time.perf_counter()
        self.debug(f"{operation} started", **context)
        try:
            yield
        except Exception as e:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            self.error(f"{operation} failed: {e}", elapsed_ms=elapsed_ms, **context)
            raise
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        self.info(f"{operation} completed", elapsed_ms=elapsed_ms, **context)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger configured from the environment."""
    return StructuredLogger(name, get_logging_config())


# =============================================================================
# ERROR HANDLING
# =============================================================================

class SourceSpellError(Exception):
    """Base exception for sourcespell."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 exit_status: int = EXIT_INTERNAL_ERROR, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.exit_status = exit_status
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a serializable dict."""
        return {
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ConfigurationError(SourceSpellError):
    """Invalid invocation or configuration."""
    def __init__(self, message: str, option: Optional[str] = None, **kwargs):
        super().__init__(message, code="CONFIG_ERROR", exit_status=EXIT_INVOCATION_ERROR,
                         details={'option': option, **kwargs})


class DiffParseError(SourceSpellError):
    """Malformed unified diff."""
    def __init__(self, message: str, line: Optional[str] = None, **kwargs):
        super().__init__(message, code="DIFF_ERROR",
                         details={'line': line, **kwargs})


class DictionaryError(SourceSpellError):
    """Dictionary could not be loaded or populated."""
    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, code="DICTIONARY_ERROR",
                         details={'path': path, **kwargs})


class SourceError(SourceSpellError):
    """Source file could not be read or parsed."""
    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, code="SOURCE_ERROR",
                         details={'path': path, **kwargs})
