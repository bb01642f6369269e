"""
factkit Configuration

Settings are read from the environment once, at import time.

Environment:
    FACTKIT_LOG_LEVEL            Level for the "factkit" logger (default WARNING)
    FACTKIT_LOG_FORMAT           "text" or "json" (default text)
    FACTKIT_LOG_RESULTS          Log a summary line per evaluated fact (default false)
    FACTKIT_STRICT_PACK_VERSION  Reject fact packs with another major schema version (default true)

The library never configures the root logger. Call configure_logging() from
a runner or a conftest to get output.
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional


FACTKIT_LOG_LEVEL = os.getenv("FACTKIT_LOG_LEVEL", "WARNING")
FACTKIT_LOG_FORMAT = os.getenv("FACTKIT_LOG_FORMAT", "text").lower()
FACTKIT_LOG_RESULTS = os.getenv("FACTKIT_LOG_RESULTS", "false").lower() == "true"
FACTKIT_STRICT_PACK_VERSION = os.getenv("FACTKIT_STRICT_PACK_VERSION", "true").lower() == "true"

LOGGER_NAME = "factkit"

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Extra record attributes copied into JSON log lines
_EXTRA_FIELDS = ("fact", "function_id", "state", "passed", "code")


# =============================================================================
# Logging Setup
# =============================================================================

class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=repr)


def configure_logging(
    level: Optional[str] = None,
    fmt: Optional[str] = None,
) -> logging.Logger:
    """
    Attach a stream handler to the factkit logger.

    Calling it again replaces the handler installed by the previous call
    instead of adding a second one.

    Args:
        level: Log level name (defaults to FACTKIT_LOG_LEVEL)
        fmt: "text" or "json" (defaults to FACTKIT_LOG_FORMAT)

    Returns:
        The configured "factkit" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, (level or FACTKIT_LOG_LEVEL).upper()))

    for existing in list(logger.handlers):
        if getattr(existing, "_factkit_handler", False):
            logger.removeHandler(existing)

    handler = logging.StreamHandler()
    handler._factkit_handler = True
    if (fmt or FACTKIT_LOG_FORMAT) == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    logger.addHandler(handler)
    return logger
