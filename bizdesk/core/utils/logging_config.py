"""
Structured logging configuration for BizDesk.

JSON lines in production, colored single-line output in development.
Extra fields passed through log_with_context() are carried on the record
as `record.extra` and rendered by both formatters.
"""

import os
import sys
import json
import logging
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        extra = getattr(record, 'extra', None)
        if extra:
            log_entry.update(extra)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, '')
        reset = self.RESET if color else ''

        timestamp = datetime.now().strftime('%H:%M:%S')
        location = f'{record.name}:{record.lineno}'

        line = f'{color}[{timestamp}] {record.levelname:8}{reset} {location:40} {record.getMessage()}'

        extra = getattr(record, 'extra', None)
        if extra:
            line += ' | ' + ' '.join(f'{k}={v}' for k, v in extra.items())

        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)

        return line


def _use_json(json_format):
    if json_format is not None:
        return json_format
    # JSON under gunicorn or when PRODUCTION=true
    return (os.environ.get('PRODUCTION', '').lower() == 'true'
            or 'gunicorn' in os.environ.get('SERVER_SOFTWARE', ''))


def setup_logging(level: str = 'INFO', json_format: bool = None,
                  logger_name: str = 'bizdesk') -> logging.Logger:
    """Configure and return the application root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Force JSON on/off. None auto-detects from the environment.
        logger_name: Parent logger; every `bizdesk.*` logger inherits its handler.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logger.level)
    handler.setFormatter(JSONFormatter() if _use_json(json_format) else DevelopmentFormatter())

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = 'bizdesk') -> logging.Logger:
    """Get a logger, e.g. get_logger('bizdesk.reporting.executor')."""
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: int, message: str, **context):
    """Log a message with additional structured fields."""
    if not logger.isEnabledFor(level):
        return
    record = logger.makeRecord(logger.name, level, '', 0, message, (), None)
    record.extra = context
    logger.handle(record)
