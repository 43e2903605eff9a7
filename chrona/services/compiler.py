"""
Format compiler.

Turns a format string such as ``":incoming :method :url :status"`` into a
Plan: two segment templates (request phase, response phase) with placeholder
slots, the field renderers that fill those slots, and the position of the
dynamic outcome connector. Plans are built once per format string and kept
in a PlanCache; rendering a line is then a walk over prebuilt closures.

Grammar: tokens are ``:name`` or ``:[name]`` (bracketed values are printed as
``[value]``). Text between tokens is kept as literal segments, split on
whitespace. Names outside the Token vocabulary are dropped without error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Union

from chrona.errors import PlanInvariantError
from chrona.models.context import Outcome, RenderContext, Rendered
from chrona.services.extractors import Colored, effective_status
from chrona.services.tokens import REQUEST_TOKENS, RESPONSE_TOKENS, Token, TokenSpec
from chrona.utils.colors import paint
from chrona.utils.logger import get_logger

logger = get_logger(__name__)

_TOKEN_PATTERN = re.compile(r"(:\[[^\]]+\]|:[a-z\-_]+)", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

FieldRenderer = Callable[[RenderContext], str]

# Placeholder marker inside a segment tuple.
SLOT = None


# ── Parsing ───────────────────────────────────────────────────


@dataclass(frozen=True)
class TokenRef:
    token: Token
    bracketed: bool = False


@dataclass(frozen=True)
class Literal:
    text: str


FormatItem = Union[TokenRef, Literal]


@dataclass(frozen=True)
class ParsedFormat:
    """Ordered items of a format string plus what was thrown away."""

    items: tuple[FormatItem, ...]
    has_incoming: bool = False
    dropped: tuple[str, ...] = ()


def parse_format(fmt: str) -> ParsedFormat:
    """Split *fmt* into literal and token items, in source order."""
    items: list[FormatItem] = []
    dropped: list[str] = []
    has_incoming = False

    # re.split with one capture group alternates literal, token, literal, ...
    for index, fragment in enumerate(_TOKEN_PATTERN.split(fmt)):
        if not fragment.strip():
            continue

        if index % 2 == 0:
            items.extend(Literal(text) for text in fragment.split())
            continue

        fragment = _WHITESPACE.sub("", fragment)
        bracketed = fragment.startswith(":[")
        name = fragment[2:-1] if bracketed else fragment[1:]
        token = Token.lookup(name)

        if token is None:
            dropped.append(fragment)
            continue
        if token is Token.INCOMING:
            # only the first occurrence places the connector
            if has_incoming:
                dropped.append(fragment)
                continue
            has_incoming = True

        items.append(TokenRef(token, bracketed))

    return ParsedFormat(tuple(items), has_incoming, tuple(dropped))


# ── Plan ──────────────────────────────────────────────────────


def _connector(ctx: RenderContext, colors: bool) -> str:
    """Outcome marker shown between the phase label and the fields."""
    if ctx.error is not None:
        return paint("xxx", "red", colors)
    if ctx.outcome is Outcome.CLOSE:
        return paint("-x-", "yellow", colors)

    status = effective_status(ctx.response, None)
    if status >= 500:
        return paint("xxx", "red", colors)
    if status == 404:
        return paint("-X-", "cyan", colors)
    return paint("-->", "gray", colors)


@dataclass(frozen=True)
class Plan:
    """Compiled, immutable rendering recipe for one format string.

    ``*_segments`` hold literal text or SLOT; the n-th SLOT of a phase is
    filled by the n-th renderer of that phase. ``connector_index`` points at
    the response segment replaced by the outcome connector at render time.
    """

    request_segments: tuple[str | None, ...]
    response_segments: tuple[str | None, ...]
    request_fields: tuple[FieldRenderer, ...]
    response_fields: tuple[FieldRenderer, ...]
    connector_index: int | None = None
    banner: bool = False
    colors: bool = True

    def __post_init__(self) -> None:
        for phase, segments, fields in (
            ("request", self.request_segments, self.request_fields),
            ("response", self.response_segments, self.response_fields),
        ):
            slots = sum(1 for segment in segments if segment is SLOT)
            if slots != len(fields):
                raise PlanInvariantError(
                    f"{phase} phase has {slots} slots but {len(fields)} renderers"
                )

        index = self.connector_index
        if index is not None and not (
            0 <= index < len(self.response_segments)
            and self.response_segments[index] is not SLOT
        ):
            raise PlanInvariantError(f"connector index {index} is not a literal segment")

    def render_request(self, ctx: RenderContext) -> Rendered:
        values = tuple(render(ctx) for render in self.request_fields)
        return Rendered(self._join(ctx, self.request_segments, values), values)

    def render_response(self, ctx: RenderContext) -> Rendered:
        values = tuple(render(ctx) for render in self.response_fields)

        segments = self.response_segments
        if self.connector_index is not None:
            patched = list(segments)
            patched[self.connector_index] = _connector(ctx, self.colors)
            segments = tuple(patched)

        return Rendered(self._join(ctx, segments, values), values)

    def _join(
        self,
        ctx: RenderContext,
        segments: tuple[str | None, ...],
        values: tuple[str, ...],
    ) -> str:
        fill = iter(values)
        parts = [next(fill) if segment is SLOT else segment for segment in segments]
        if self.banner:
            label = f" {ctx.request.protocol.upper()} "
            parts.insert(0, paint(label, "banner", self.colors))
        return " ".join(parts)


# ── Cache ─────────────────────────────────────────────────────


class PlanCache:
    """Append-only map of format string -> Plan.

    Entries are published with ``dict.setdefault``: two threads racing on the
    same format may both compile, but only the first plan is stored and both
    get it back. With ``max_entries`` set, a full cache stops storing new
    plans and never evicts old ones.
    """

    def __init__(self, max_entries: int = 0) -> None:
        self.max_entries = max_entries
        self._plans: dict[str, Plan] = {}

    def __len__(self) -> int:
        return len(self._plans)

    def __contains__(self, fmt: object) -> bool:
        return fmt in self._plans

    def get(self, fmt: str) -> Plan | None:
        return self._plans.get(fmt)

    def get_or_compile(self, fmt: str, build: Callable[[str], Plan]) -> Plan:
        plan = self._plans.get(fmt)
        if plan is not None:
            return plan

        logger.debug("Plan cache miss for %r", fmt)
        plan = build(fmt)
        if self.max_entries and len(self._plans) >= self.max_entries:
            logger.warning(
                "Plan cache full (%d entries); format %r will be recompiled on each use",
                self.max_entries,
                fmt,
            )
            return plan
        return self._plans.setdefault(fmt, plan)


# ── Compiler ──────────────────────────────────────────────────


def _bind(spec: TokenSpec, bracketed: bool, colors: bool) -> FieldRenderer:
    """Close over one token's extractor, colour policy and presentation."""

    def render(ctx: RenderContext) -> str:
        result = spec.extract(ctx)
        color = spec.color
        if isinstance(result, Colored):
            result, color = result.value, result.color
        text = f"[{result}]" if bracketed else str(result)
        return paint(text, color, colors)

    return render


class FormatCompiler:
    """Compiles format strings into Plans, memoized in a PlanCache.

    ``always_connector`` reserves the outcome connector at the start of both
    lines even when ``:incoming`` is absent. By default the connector only
    appears where ``:incoming`` is written.
    """

    def __init__(
        self,
        cache: PlanCache | None = None,
        *,
        colors: bool = True,
        banner: bool = False,
        always_connector: bool = False,
    ) -> None:
        self.cache = cache if cache is not None else PlanCache()
        self.colors = colors
        self.banner = banner
        self.always_connector = always_connector

    def compile(self, fmt: str) -> Plan:
        return self.cache.get_or_compile(fmt, self.build)

    def build(self, fmt: str) -> Plan:
        """Compile *fmt* without consulting the cache."""
        parsed = parse_format(fmt)
        colors = self.colors

        request_segments: list[str | None] = []
        response_segments: list[str | None] = []
        request_fields: list[FieldRenderer] = []
        response_fields: list[FieldRenderer] = []
        connector_index: int | None = None

        if parsed.has_incoming:
            request_segments.append(paint("[INCOMING]", "gray", colors))
            response_segments.append(paint("[OUTGOING]", "gray", colors))
        elif self.always_connector:
            request_segments.append(paint("<--", "gray", colors))
            response_segments.append("-->")
            connector_index = 0

        for item in parsed.items:
            if isinstance(item, Literal):
                request_segments.append(item.text)
                response_segments.append(item.text)
                continue

            if item.token is Token.INCOMING:
                request_segments.append(paint("<--", "gray", colors))
                response_segments.append("-->")
                connector_index = len(response_segments) - 1
                continue

            request_spec = REQUEST_TOKENS.get(item.token)
            if request_spec is not None:
                request_segments.append(SLOT)
                request_fields.append(_bind(request_spec, item.bracketed, colors))

            response_spec = RESPONSE_TOKENS.get(item.token)
            if response_spec is not None:
                response_segments.append(SLOT)
                response_fields.append(_bind(response_spec, item.bracketed, colors))

        if parsed.dropped:
            logger.debug("Dropped unknown tokens from %r: %s", fmt, ", ".join(parsed.dropped))
        logger.debug(
            "Compiled %r: %d request fields, %d response fields",
            fmt,
            len(request_fields),
            len(response_fields),
        )

        return Plan(
            request_segments=tuple(request_segments),
            response_segments=tuple(response_segments),
            request_fields=tuple(request_fields),
            response_fields=tuple(response_fields),
            connector_index=connector_index,
            banner=self.banner,
            colors=colors,
        )
