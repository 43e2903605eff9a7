"""
Request logging middleware.

Prints two lines per HTTP exchange from a compiled format string: one when
the request arrives, one when the response completes. Completion is the
first of two signals: the final body chunk was sent (finish), or the client
went away first (close). Only the first signal produces a line.

Implemented as pure ASGI middleware so both signals can be observed on the
``send`` / ``receive`` channels.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from typing import Any

from starlette.middleware import Middleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from chrona.config import get_settings
from chrona.models.context import Outcome, RenderContext, Rendered, RequestView, ResponseView
from chrona.services.compiler import FormatCompiler, Plan, PlanCache
from chrona.services.transport import Transporter, logging_transporter
from chrona.services.transport import transporter as resolve_transporter
from chrona.utils.latch import CompletionLatch
from chrona.utils.logger import get_logger

logger = get_logger("request")

# Request-state key holding the perf_counter() start of the exchange. The
# response line reads it back, so a handler that moves or removes it changes
# the reported response time.
START_TIME_KEY = "chrona.start_time"


class RequestLoggerMiddleware:
    """Logs a request-phase and a response-phase line for each HTTP request.

    Unset options fall back to ``CHRONA_*`` settings. Passing *compiler*
    overrides *colors*, *banner* and *always_connector*.
    """

    def __init__(
        self,
        app: ASGIApp,
        format: str | None = None,
        transporter: Any = None,
        *,
        colors: bool | None = None,
        banner: bool | None = None,
        always_connector: bool | None = None,
        compiler: FormatCompiler | None = None,
    ) -> None:
        self.app = app
        settings = get_settings()

        if compiler is None:
            compiler = FormatCompiler(
                PlanCache(settings.PLAN_CACHE_MAX_ENTRIES),
                colors=settings.colors_enabled if colors is None else colors,
                banner=settings.BANNER if banner is None else banner,
                always_connector=(
                    settings.ALWAYS_CONNECTOR if always_connector is None else always_connector
                ),
            )
        self.compiler = compiler
        self.format = format or settings.FORMAT

        default = logging_transporter() if settings.SINK == "logging" else None
        self.transport: Transporter = resolve_transporter(transporter, default)

        # compile up front; requests only ever hit the cache
        self.compiler.compile(self.format)
        logger.debug("Request logging enabled with format %r", self.format)

    @property
    def plan(self) -> Plan:
        return self.compiler.compile(self.format)

    def emit(self, rendered: Rendered) -> None:
        self.transport(rendered.line, rendered.args)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        plan = self.plan
        start = time.perf_counter()
        state = scope.setdefault("state", {})
        state[START_TIME_KEY] = start

        ctx = RenderContext(
            request=RequestView.from_scope(scope),
            response=ResponseView(),
            start=start,
        )
        self.emit(plan.render_request(ctx))

        def done(outcome: Outcome, error: BaseException | None = None) -> None:
            response_ctx = replace(ctx.for_response(outcome, error), start=state.get(START_TIME_KEY))
            self.emit(plan.render_response(response_ctx))

        latch: CompletionLatch[Outcome] = CompletionLatch(done)
        on_finish = latch.signal(Outcome.FINISH)
        on_close = latch.signal(Outcome.CLOSE)

        async def receive_wrapper() -> Message:
            message = await receive()
            if message["type"] == "http.disconnect":
                on_close()
            return message

        async def send_wrapper(message: Message) -> None:
            ctx.response.observe(message)
            try:
                await send(message)
            except OSError:
                on_close()
                raise
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                on_finish()

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        except asyncio.CancelledError:
            on_close()
            raise
        except Exception as exc:
            on_finish(error=exc)
            raise


def logger_middleware(format: str | None = None, options: Any = None, **kwargs: Any) -> Middleware:
    """Starlette ``Middleware`` entry for ``Starlette(middleware=[...])`` / FastAPI."""
    return Middleware(RequestLoggerMiddleware, format=format, transporter=options, **kwargs)
