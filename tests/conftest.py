"""Shared fixtures: a capturing sink, plain-text compilers and ASGI helpers."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest
from starlette.datastructures import Headers, MutableHeaders

from chrona.config import get_settings
from chrona.models.context import RenderContext, RequestView, ResponseView
from chrona.services.compiler import FormatCompiler


class CapturingSink:
    """Transporter that remembers every line it was given."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.args: list[tuple] = []

    def __call__(self, line: str, args: Any) -> None:
        self.lines.append(line)
        self.args.append(tuple(args))


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Isolate tests from the developer's CHRONA_* environment."""
    for name in ("CHRONA_FORMAT", "CHRONA_COLORS", "CHRONA_BANNER", "CHRONA_ALWAYS_CONNECTOR", "CHRONA_SINK"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sink() -> CapturingSink:
    return CapturingSink()


@pytest.fixture
def compiler() -> FormatCompiler:
    return FormatCompiler(colors=False)


@pytest.fixture
def make_ctx() -> Callable[..., RenderContext]:
    def factory(
        method: str = "GET",
        url: str = "/users",
        request_headers: dict[str, str] | None = None,
        status: int | None = 200,
        response_headers: dict[str, str] | None = None,
        error: BaseException | None = None,
        start: float | None = None,
        **request_fields: Any,
    ) -> RenderContext:
        request = RequestView(
            method=method,
            url=url,
            headers=Headers(request_headers or {}),
            **request_fields,
        )
        response = ResponseView(
            status_code=status,
            headers=MutableHeaders(response_headers or {"content-length": "42"}),
        )
        return RenderContext(request=request, response=response, error=error, start=start)

    return factory


def make_scope(
    path: str = "/users",
    method: str = "GET",
    query: bytes = b"",
    headers: list[tuple[bytes, bytes]] | None = None,
    client: tuple[str, int] | None = ("127.0.0.1", 51000),
) -> dict:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "query_string": query,
        "root_path": "",
        "headers": headers or [(b"host", b"testserver")],
        "client": client,
        "server": ("testserver", 80),
    }


def run_exchange(middleware, scope: dict, incoming: list[dict] | None = None) -> list[dict]:
    """Drive one ASGI exchange by hand and return the messages sent."""
    pending = list(incoming or [{"type": "http.request", "body": b"", "more_body": False}])
    sent: list[dict] = []

    async def receive() -> dict:
        if pending:
            return pending.pop(0)
        return {"type": "http.disconnect"}

    async def send(message: dict) -> None:
        sent.append(message)

    asyncio.run(middleware(scope, receive, send))
    return sent


@pytest.fixture
def scope_factory() -> Callable[..., dict]:
    return make_scope


@pytest.fixture
def exchange() -> Callable[..., list[dict]]:
    return run_exchange
