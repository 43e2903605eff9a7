"""
Number humanization helpers.

group_digits() inserts thousands separators into the integer part of a
numeric string; format_bytes() renders a byte count with a binary unit
(``42B``, ``1.5KB``, ``3MB``).
"""

from __future__ import annotations

import re

_THOUSANDS = re.compile(r"(\d)(?=(\d\d\d)+(?!\d))")
_TRAILING_ZEROS = re.compile(r"\.0+$|(\.[0-9]*[1-9])0+$")

_UNITS: tuple[tuple[str, int], ...] = (
    ("PB", 1 << 50),
    ("TB", 1 << 40),
    ("GB", 1 << 30),
    ("MB", 1 << 20),
    ("KB", 1 << 10),
)


def group_digits(text: str, delimiter: str = ",", separator: str = ".") -> str:
    """``"12345ms"`` -> ``"12,345ms"``. Only the part before the first dot is grouped."""
    head, dot, tail = text.partition(".")
    head = _THOUSANDS.sub(rf"\1{delimiter}", head)
    return f"{head}{separator}{tail}" if dot else head


def format_bytes(value: int | float, decimals: int = 2) -> str:
    """Render *value* bytes using 1024-based units, trimming trailing zeros."""
    magnitude = abs(value)
    unit, scale = "B", 1
    for name, size in _UNITS:
        if magnitude >= size:
            unit, scale = name, size
            break

    text = f"{value / scale:.{decimals}f}"
    text = _TRAILING_ZEROS.sub(r"\1", text)
    return f"{text}{unit}"
