"""
Sink adapter.

Normalizes the caller's output option into one call shape,
``sink(line, args)``. The option may be a callable, an object or mapping
carrying a ``transporter`` callable, or nothing (stdout). The sink is
called as-is: if it raises, the exception reaches the host application.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, Mapping, Sequence

from chrona.errors import TransporterError
from chrona.utils.logger import get_logger

Transporter = Callable[[str, Sequence[Any]], None]


def stdout_transporter(line: str, args: Sequence[Any]) -> None:
    """Print the line to standard output."""
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def logging_transporter(name: str = "chrona.access", level: int = logging.INFO) -> Transporter:
    """Return a sink that emits each line as a record on logger *name*."""
    access_logger = get_logger(name)

    def transport(line: str, args: Sequence[Any]) -> None:
        access_logger.log(level, line)

    return transport


def transporter(options: Any = None, default: Transporter | None = None) -> Transporter:
    """Resolve *options* to a sink; *default* (stdout if None) when nothing is given."""
    if callable(options):
        return options

    if isinstance(options, Mapping):
        transport = options.get("transporter")
    else:
        transport = getattr(options, "transporter", None)

    if transport is None:
        return default or stdout_transporter
    if not callable(transport):
        raise TransporterError(
            f"transporter must be callable, got {type(transport).__name__}"
        )
    return transport
