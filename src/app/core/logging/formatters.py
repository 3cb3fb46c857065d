"""
Custom logging formatters.

  - JsonFormatter: structured JSON lines for log collectors. Includes service,
    env, version and request_id, plus any `extra={...}` keys of the call.
  - ColorFormatter: compact ANSI-colored lines for local development consoles.

Both must never raise: non-serializable extras are stringified.
"""

import json
import logging
from importlib import metadata as importlib_metadata
from typing import Any
from logging import LogRecord

SERVICE_NAME = "users-productos-api"


def get_project_version(default: str = "unknown") -> str:
    """Version of the installed distribution, or `default` when running from a checkout."""
    try:
        return importlib_metadata.version(SERVICE_NAME)
    except importlib_metadata.PackageNotFoundError:
        return default


PROJECT_VERSION = get_project_version()

# Attributes every LogRecord has; anything else on the record came from `extra=`
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Construction:
      - env: environment name (e.g., "development" | "production")
      - service: logical service name to include in logs
      - datefmt: optional date format used by formatTime
    """

    def __init__(self, *, env: str | None = None, service: str = SERVICE_NAME, datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in log_record or key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, ValueError):
                log_record[key] = str(value)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    Development-friendly colored formatter: colors the level name and keeps
    the rest of the configured format untouched.
    """

    COLOR_CODES = {
        "DEBUG": "\033[36m",      # cyan
        "INFO": "\033[32m",       # green
        "WARNING": "\033[33m",    # yellow
        "ERROR": "\033[31m",      # red
        "CRITICAL": "\033[1;41m", # bold on red background
    }
    RESET = "\033[0m"

    def format(self, record: LogRecord) -> str:
        original = record.levelname
        color = self.COLOR_CODES.get(original)
        if color:
            record.levelname = f"{color}{original:<8}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original
