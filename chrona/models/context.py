"""
Render-time data models.

RequestView and ResponseView are the read-only (respectively write-through)
views of an ASGI exchange that extractors consume. RenderContext bundles them
with the error, start time, phase and outcome for a single render call;
Rendered is what a render hands to the sink.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import Message, Scope


class Outcome(str, enum.Enum):
    """Completion signal that ended an exchange."""

    FINISH = "finish"
    CLOSE = "close"


# ── Request ───────────────────────────────────────────────────

@dataclass(frozen=True)
class RequestView:
    """What the extractors need from an incoming request."""

    method: str
    url: str
    headers: Headers = field(default_factory=Headers)
    http_version_major: int = 1
    http_version_minor: int = 1
    protocol: str = "http"
    peer_address: str | None = None
    # Older transports exposed the peer on a separate connection object.
    # ASGI has no such thing, so this stays None unless a host fills it in.
    legacy_peer_address: str | None = None

    @classmethod
    def from_scope(cls, scope: Scope) -> RequestView:
        raw_path = scope.get("raw_path")
        if raw_path:
            path = raw_path.decode("latin-1")
        else:
            path = scope.get("root_path", "") + scope.get("path", "")
        query = scope.get("query_string", b"")
        url = f"{path}?{query.decode('latin-1')}" if query else path

        major, _, minor = str(scope.get("http_version", "1.1")).partition(".")
        client = scope.get("client")

        return cls(
            method=scope.get("method", "GET"),
            url=url,
            headers=Headers(raw=list(scope.get("headers", []))),
            http_version_major=int(major or 1),
            http_version_minor=int(minor or 0),
            protocol=scope.get("scheme", "http"),
            peer_address=client[0] if client else None,
        )


# ── Response ──────────────────────────────────────────────────

@dataclass
class ResponseView:
    """Status and headers of the outgoing response, filled in as it is sent."""

    status_code: int | None = None
    headers: MutableHeaders = field(default_factory=MutableHeaders)

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name)

    def set_header(self, name: str, value: Any) -> None:
        self.headers[name] = str(value)

    def observe(self, message: Message) -> None:
        """Record status and headers from an ``http.response.start`` message."""
        if message["type"] != "http.response.start":
            return
        self.status_code = message.get("status")
        self.headers = MutableHeaders(raw=list(message.get("headers", [])))


# ── Render ────────────────────────────────────────────────────

@dataclass(frozen=True)
class RenderContext:
    """Immutable input of one render call."""

    request: RequestView
    response: ResponseView
    error: BaseException | None = None
    start: float | None = None
    is_request: bool = True
    outcome: Outcome | None = None

    def for_response(self, outcome: Outcome, error: BaseException | None = None) -> RenderContext:
        """Same exchange, response phase, with the triggering outcome."""
        return RenderContext(
            request=self.request,
            response=self.response,
            error=error if error is not None else self.error,
            start=self.start,
            is_request=False,
            outcome=outcome,
        )


@dataclass(frozen=True)
class Rendered:
    """A finished line plus the field values it was built from."""

    line: str
    args: tuple[str, ...] = ()
