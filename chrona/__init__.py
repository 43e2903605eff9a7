"""
chrona: two-line HTTP request/response logging middleware for ASGI apps.

    from fastapi import FastAPI
    from chrona import RequestLoggerMiddleware

    app = FastAPI()
    app.add_middleware(RequestLoggerMiddleware, format=":incoming :method :url :status")
"""

from chrona.config import DEFAULT_FORMAT, Settings, get_settings
from chrona.errors import ChronaError, PlanInvariantError, TransporterError
from chrona.middleware.request_logger import RequestLoggerMiddleware, logger_middleware
from chrona.models.context import Outcome, RenderContext, Rendered, RequestView, ResponseView
from chrona.services.compiler import FormatCompiler, Plan, PlanCache, parse_format
from chrona.services.tokens import Token
from chrona.services.transport import logging_transporter, stdout_transporter, transporter

logger = logger_middleware

__all__ = [
    "DEFAULT_FORMAT",
    "ChronaError",
    "FormatCompiler",
    "Outcome",
    "Plan",
    "PlanCache",
    "PlanInvariantError",
    "RenderContext",
    "Rendered",
    "RequestLoggerMiddleware",
    "RequestView",
    "ResponseView",
    "Settings",
    "Token",
    "TransporterError",
    "get_settings",
    "logger",
    "logger_middleware",
    "logging_transporter",
    "parse_format",
    "stdout_transporter",
    "transporter",
]
