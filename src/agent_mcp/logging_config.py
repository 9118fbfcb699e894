"""Structured logging configuration for agent-mcp.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the agent_mcp namespace
- Output on stderr: stdout carries the MCP stdio transport
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

LOGGER_NAMESPACE = "agent_mcp"

# Sensitive keys that should be redacted in log output
SENSITIVE_KEYS = {
    "password", "token", "secret", "apikey", "api_key", "api_token",
    "authorization", "credential", "auth", "key", "bearer",
}

_STANDARD_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line.

    Keys: timestamp (UTC, 'Z' suffix), level, logger, message (the event
    name), context (the record's extra= fields) and exception when
    exc_info is set. Values of SENSITIVE_KEYS in context are replaced with
    "[REDACTED]"; values that are not JSON types are rendered with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: ("[REDACTED]" if k.lower() in SENSITIVE_KEYS else v)
            for k, v in record.__dict__.items()
            if k not in _STANDARD_FIELDS and not k.startswith("_")
        }

        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for local debugging (LOG_FORMAT=text)."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(
    level: Optional[str] = None, log_format: Optional[str] = None
) -> logging.Logger:
    """Configure structured logging for all agent_mcp loggers.

    Args:
        level: Optional log level override. Falls back to the LOG_LEVEL
               environment variable (default: INFO).
        log_format: Optional format override (json, text). Falls back to the
                    LOG_FORMAT environment variable (default: json).

    Returns:
        The configured agent_mcp root logger.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format is None:
        log_format = os.getenv("LOG_FORMAT", "json")

    if log_format.lower() == "text":
        formatter = TextFormatter()
    else:
        formatter = StructuredFormatter()

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(log_level)

    # Only add a handler once so repeated calls don't duplicate output
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setFormatter(formatter)

    logger.propagate = False
    return logger
