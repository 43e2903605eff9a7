"""
Diagnostic logging setup.

Configures the ``chrona`` logger hierarchy: human-readable coloured output for
development and one JSON object per record otherwise. Access lines are not
routed through here unless the ``logging`` sink is selected.
Provides get_logger(name) factory function.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from chrona.config import get_settings

ROOT_LOGGER = "chrona"


class JSONFormatter(logging.Formatter):
    """Emit each diagnostic record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


class DevFormatter(logging.Formatter):
    """Human-readable coloured formatter for local development."""

    COLORS = {
        "DEBUG": "\033[36m",     # cyan
        "INFO": "\033[32m",      # green
        "WARNING": "\033[33m",   # yellow
        "ERROR": "\033[31m",     # red
        "CRITICAL": "\033[1;31m",  # bold red
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        ts = datetime.now(timezone.utc).strftime("%H:%M:%S")
        base = f"{color}{ts} [{record.levelname:<8}]{self.RESET} {record.name}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


_configured = False


def _configure(is_dev: bool = True, level: str = "INFO") -> None:
    """Configure the package logger once, leaving the host's root logger alone."""
    global _configured
    if _configured:
        return
    _configured = True

    package = logging.getLogger(ROOT_LOGGER)
    package.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(DevFormatter() if is_dev else JSONFormatter())
    package.handlers = [handler]
    package.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``chrona`` namespace. Configures it on first call."""
    settings = get_settings()
    _configure(settings.is_development, settings.LOG_LEVEL)
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
