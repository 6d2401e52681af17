"""
Structured Logging Configuration Module

JSON log records for the decimal engine. Accumulator mutations and codec
construction are reported at DEBUG with an `operation` and `component`
field; malformed expressions are reported at DEBUG with their reason.
Level and format default to the DECIMAL_CORE_LOG_* settings.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional

from .config import get_config

ROOT_LOGGER_NAME = "decimal_core"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Structured attributes copied from the record when present
STRUCTURED_FIELDS = ("operation", "component", "extra")


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }
        for field in STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Decimals and enums serialize through str()
        return json.dumps(log_entry, default=str)


def setup_logging(level: Optional[str] = None, logger_name: str = ROOT_LOGGER_NAME,
                  log_format: Optional[str] = None) -> logging.Logger:
    """
    Attach a single stream handler to the engine's logger.

    Args:
        level: Log level name; configured log_level when omitted
        logger_name: Name of the logger
        log_format: "json" for JSONFormatter, anything else for plain text;
            configured log_format when omitted

    Returns:
        Configured logger instance
    """
    settings = get_config()
    level = level or settings.log_level
    log_format = log_format or settings.log_format

    logger = logging.getLogger(logger_name)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)


def log_operation(logger: logging.Logger, level: str, message: str,
                  operation: Optional[str] = None, component: Optional[str] = None,
                  extra: Optional[dict] = None):
    """
    Log an engine operation with structured data.

    Args:
        logger: Logger instance
        level: Log level name (debug, info, ...)
        message: Log message
        operation: Operation being performed (add, divide, encode, ...)
        component: Component performing it (accumulator, codec, ...)
        extra: Additional structured data
    """
    numeric_level = getattr(logging, level.upper())
    if not logger.isEnabledFor(numeric_level):
        return

    record = logger.makeRecord(logger.name, numeric_level, __name__, 0, message, (), None)
    if operation:
        record.operation = operation
    if component:
        record.component = component
    if extra:
        record.extra = extra

    logger.handle(record)
