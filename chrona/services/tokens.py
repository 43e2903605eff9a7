"""
Token vocabulary and registries.

Token is the closed set of names a format string may use. REQUEST_TOKENS and
RESPONSE_TOKENS map each data token to its extractor and colour for the
phase in which it is available. Both tables are read-only.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping

from chrona.models.context import RenderContext
from chrona.services import extractors
from chrona.services.extractors import Colored

Extractor = Callable[[RenderContext], "str | Colored"]


class Token(str, enum.Enum):
    INCOMING = "incoming"
    METHOD = "method"
    URL = "url"
    DATE = "date"
    REMOTE_ADDRESS = "remote-address"
    HTTP_VERSION = "http-version"
    STATUS = "status"
    CONTENT_LENGTH = "content-length"
    RESPONSE_TIME = "response-time"
    REFERRER = "referrer"
    USER_AGENT = "user-agent"

    @classmethod
    def lookup(cls, name: str) -> Token | None:
        """Token for *name*, or None when it is not part of the vocabulary."""
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class TokenSpec:
    """Extractor plus base colour. A Colored result overrides the base colour."""

    extract: Extractor
    color: str = "gray"


def _status(ctx: RenderContext) -> Colored:
    status = extractors.effective_status(ctx.response, ctx.error)
    return Colored(str(status), extractors.status_color(status))


_METHOD = TokenSpec(lambda ctx: ctx.request.method, "whiteBright")
_URL = TokenSpec(lambda ctx: ctx.request.url, "magenta")
_DATE = TokenSpec(lambda ctx: extractors.timestamp())


REQUEST_TOKENS: Mapping[Token, TokenSpec] = MappingProxyType({
    Token.METHOD: _METHOD,
    Token.URL: _URL,
    Token.DATE: _DATE,
    Token.REMOTE_ADDRESS: TokenSpec(lambda ctx: extractors.client_address(ctx.request)),
    Token.REFERRER: TokenSpec(lambda ctx: extractors.referrer(ctx.request)),
    Token.USER_AGENT: TokenSpec(lambda ctx: extractors.user_agent(ctx.request)),
    Token.HTTP_VERSION: TokenSpec(lambda ctx: extractors.http_version(ctx.request)),
})

RESPONSE_TOKENS: Mapping[Token, TokenSpec] = MappingProxyType({
    Token.METHOD: _METHOD,
    Token.URL: _URL,
    Token.DATE: _DATE,
    Token.STATUS: TokenSpec(_status),
    Token.CONTENT_LENGTH: TokenSpec(
        lambda ctx: extractors.content_length(ctx.response, ctx.error)
    ),
    Token.RESPONSE_TIME: TokenSpec(lambda ctx: extractors.elapsed(ctx.start)),
})
