"""
ANSI colour helpers.

Wraps text in terminal escape sequences by colour name. Unknown names fall
back to gray; painting with ``enabled=False`` returns the text untouched.
"""

from __future__ import annotations

RESET = "\033[0m"

PALETTE: dict[str, str] = {
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
    "gray": "\033[90m",
    "grey": "\033[90m",
    "redBright": "\033[91m",
    "greenBright": "\033[92m",
    "yellowBright": "\033[93m",
    "blueBright": "\033[94m",
    "magentaBright": "\033[95m",
    "cyanBright": "\033[96m",
    "whiteBright": "\033[97m",
    "banner": "\033[1;44m",  # bold on blue background
}

DEFAULT_COLOR = "gray"


def paint(text: str, color: str | None, enabled: bool = True) -> str:
    """Return *text* wrapped in the escape sequence for *color*."""
    if not enabled:
        return text
    code = PALETTE.get(color or DEFAULT_COLOR, PALETTE[DEFAULT_COLOR])
    return f"{code}{text}{RESET}"
