"""
Example FastAPI application.

Mounts RequestLoggerMiddleware with a format that uses most tokens and
exposes one route per status class, plus two failing routes, so every
connector variant can be seen in a terminal:

    uvicorn chrona.main:app --reload
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, Response

from chrona.config import get_settings
from chrona.middleware.error_handler import HTTPError, setup_error_handlers
from chrona.middleware.request_logger import RequestLoggerMiddleware
from chrona.utils.logger import get_logger

logger = get_logger(__name__)

EXAMPLE_FORMAT = (
    ":[date] :incoming :method :url :status :response-time :content-length "
    ":user-agent :http-version"
)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: runs on startup and shutdown."""
    settings = get_settings()
    logger.info(
        "chrona example started  env=%s  colors=%s",
        settings.ENVIRONMENT,
        settings.colors_enabled,
    )
    yield
    logger.info("chrona example shutting down")


app = FastAPI(
    title="chrona example",
    version="1.0.0",
    description="Request logger demo routes",
    lifespan=lifespan,
)

# ── Middleware ────────────────────────────────────────────────
setup_error_handlers(app)
app.add_middleware(RequestLoggerMiddleware, format=EXAMPLE_FORMAT)


# ── Routes ────────────────────────────────────────────────────
@app.get("/200")
async def ok() -> PlainTextResponse:
    return PlainTextResponse("OK", status_code=200)


@app.get("/301")
async def moved() -> PlainTextResponse:
    return PlainTextResponse("Moved Permanently", status_code=301)


@app.get("/304")
async def not_modified() -> Response:
    return Response(status_code=304)


@app.get("/404")
async def not_found() -> PlainTextResponse:
    return PlainTextResponse("Not Found", status_code=404)


@app.get("/500")
async def server_error() -> PlainTextResponse:
    return PlainTextResponse("Internal Server Error", status_code=500)


@app.get("/500-boom")
async def boom() -> None:
    raise HTTPError.bad_implementation("Bad implementation")


@app.get("/error")
async def error() -> None:
    raise RuntimeError("Error")


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    """Return API health status."""
    return {"status": "ok", "version": "1.0.0"}
