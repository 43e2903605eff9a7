"""
Example-app error handling.

HTTPError is a Boom-style exception: it carries the HTTP status the client
should see, and the registered handler turns it into a JSON body keyed by
that status. Because the handler runs inside the request logger, the
access line reports the same status as the body. Any other exception is
left to Starlette's ServerErrorMiddleware.
"""

from __future__ import annotations

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chrona.utils.logger import get_logger

logger = get_logger(__name__)


class HTTPError(Exception):
    """Exception rendered as ``{"statusCode", "error", "message"}``."""

    def __init__(self, status_code: int = 500, message: str | None = None) -> None:
        self.status_code = status_code
        self.error = _reason(status_code)
        self.message = message or self.error
        super().__init__(self.message)

    @classmethod
    def bad_implementation(cls, message: str | None = None) -> HTTPError:
        return cls(500, message)

    @classmethod
    def not_found(cls, message: str | None = None) -> HTTPError:
        return cls(404, message)

    @property
    def is_server(self) -> bool:
        return self.status_code >= 500

    def payload(self) -> dict[str, int | str]:
        # server errors never expose their message
        message = "An internal server error occurred" if self.is_server else self.message
        return {"statusCode": self.status_code, "error": self.error, "message": message}


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown"


def setup_error_handlers(app: FastAPI) -> None:
    """Register the HTTPError handler on the FastAPI application."""

    @app.exception_handler(HTTPError)
    async def http_error_handler(request: Request, exc: HTTPError) -> JSONResponse:
        log = logger.error if exc.is_server else logger.warning
        log("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.payload())
