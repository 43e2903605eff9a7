"""
Primitive extractors.

Pure functions that derive one printable value from a request or response:
client IP resolution with header-priority fallback, Apache-style timestamps,
elapsed-time humanization, content-length humanization and status colours.
None of them raise on bad input; a field that cannot be computed degrades
to a placeholder such as ``"-"``.
"""

from __future__ import annotations

import ipaddress
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from chrona.models.context import RequestView, ResponseView
from chrona.utils.humanize import format_bytes, group_digits

_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# Status class -> colour. Anything not listed uses _DEFAULT_STATUS_COLOR.
_STATUS_COLORS: dict[int, str] = {
    1: "green",
    2: "green",
    3: "cyan",
    4: "yellow",
    5: "red",
}
_DEFAULT_STATUS_COLOR = "yellow"

# Headers consulted after x-forwarded-for, in priority order.
_SINGLE_IP_HEADERS = ("x-real-ip", "x-forwarded", "forwarded-for")

_NO_BODY_STATUSES = frozenset({204, 205, 304})

_SECONDS_THRESHOLD_MS = 10_000


@dataclass(frozen=True)
class Colored:
    """A value whose colour was computed from the data itself."""

    value: str
    color: str


# ── IP addresses ──────────────────────────────────────────────


def is_ip(value: str | None) -> bool:
    """True when *value* is a literal IPv4 or IPv6 address.

    IPv6 zone IDs (``fe80::1%eth0``) are rejected: the zone is free text and
    would otherwise be copied into the log line as is.
    """
    if not value or "%" in value:
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def forwarded_for(value: str | None) -> str:
    """First valid address in an ``x-forwarded-for`` list, or ``"-"``.

    Entries of the form ``host:port`` have the port stripped. IPv6 entries
    contain several colons and are left as they are.
    """
    if not value:
        return "-"

    for entry in value.split(","):
        candidate = entry.strip()
        if ":" in candidate:
            parts = candidate.split(":")
            if len(parts) == 2:
                candidate = parts[0]
        if is_ip(candidate):
            return candidate

    return "-"


def client_address(request: RequestView) -> str:
    """Resolve the client address from proxy headers, then the transport."""
    headers = request.headers

    client_ip = headers.get("x-client-ip")
    if is_ip(client_ip):
        return client_ip

    forwarded = forwarded_for(headers.get("x-forwarded-for"))
    if forwarded != "-":
        return forwarded

    for name in _SINGLE_IP_HEADERS:
        value = headers.get(name)
        if is_ip(value):
            return value

    if is_ip(request.peer_address):
        return request.peer_address

    if is_ip(request.legacy_peer_address):
        return request.legacy_peer_address

    return "-"


# ── Time ──────────────────────────────────────────────────────


def timestamp(now: datetime | None = None) -> str:
    """``DD/Mon/YYYY:HH:MM:SS +0000`` in UTC, e.g. ``05/Mar/2024:09:07:02 +0000``."""
    d = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return (
        f"{d.day:02d}/{_MONTHS[d.month - 1]}/{d.year}:"
        f"{d.hour:02d}:{d.minute:02d}:{d.second:02d} +0000"
    )


def elapsed_color(delta_ms: float) -> str:
    """Latency bucket colour; NaN lands in the slowest bucket."""
    if delta_ms < 50:
        return "green"
    if delta_ms < 100:
        return "magenta"
    return "red"


def elapsed(start: float | None, now: float | None = None) -> Colored:
    """Time since *start* (``time.perf_counter`` seconds) as ``"12ms"`` / ``"15s"``."""
    if start is None or math.isnan(start):
        return Colored("-", elapsed_color(math.nan))

    if now is None:
        now = time.perf_counter()
    delta_ms = round((now - start) * 1000)

    if delta_ms < _SECONDS_THRESHOLD_MS:
        text = f"{delta_ms}ms"
    else:
        # half-up, not banker's rounding
        text = f"{math.floor(delta_ms / 1000 + 0.5)}s"

    return Colored(group_digits(text), elapsed_color(delta_ms))


# ── Status & body ─────────────────────────────────────────────


def effective_status(response: ResponseView, error: BaseException | None) -> int:
    """Error status (default 500) wins; otherwise the response status (default 404)."""
    if error is not None:
        status = getattr(error, "status_code", None) or getattr(error, "status", None)
        return status if isinstance(status, int) and status else 500
    return response.status_code or 404


def status_color(status: int) -> str:
    return _STATUS_COLORS.get(status // 100, _DEFAULT_STATUS_COLOR)


def content_length(response: ResponseView, error: BaseException | None) -> str:
    """Humanized ``content-length`` header, ``"-"`` if absent, empty if no body is expected."""
    if effective_status(response, error) in _NO_BODY_STATUSES:
        return ""

    header = response.get_header("content-length")
    if header is None:
        return "-"
    try:
        length = int(header.strip())
    except ValueError:
        return "-"

    return format_bytes(length).lower()


# ── Request fields ────────────────────────────────────────────


def http_version(request: RequestView) -> str:
    return f"HTTP/{request.http_version_major}.{request.http_version_minor}"


def referrer(request: RequestView) -> str:
    return request.headers.get("referer") or request.headers.get("referrer") or "-"


def user_agent(request: RequestView) -> str:
    return request.headers.get("user-agent") or "-"
