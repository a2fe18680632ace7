import json
import re
from dataclasses import dataclass
from typing import Protocol

from loguru import logger
from pydantic import BaseModel, ValidationError

from finassist.chat.scanner import NOT_FOUND, find_marker_end, find_matching_brace
from finassist.models.schemas import (
    ActionDirective,
    ChartDirective,
    ParsedMessage,
    ParseResult,
    TableDirective,
)

CHART = "CHART"
TABLE = "TABLE"
ACTION = "ACTION"

# Subtypes are matched in any case and lowercased on output
MARKER_PATTERNS: dict[str, re.Pattern] = {
    CHART: re.compile(r"\[CHART:(\w+):"),
    TABLE: re.compile(r"\[TABLE:"),
    ACTION: re.compile(r"\[ACTION:(\w+):"),
}
ANY_MARKER_PREFIX = re.compile(r"\[(?:CHART|TABLE|ACTION):")
EXCESS_NEWLINES = re.compile(r"\n{3,}")
HORIZONTAL_SPACE = " \t"


class ParserLogger(Protocol):
    """loguru-style ``{}`` placeholders."""

    def debug(self, message: str, *args) -> None: ...

    def warning(self, message: str, *args) -> None: ...


@dataclass(frozen=True)
class DirectiveMarker:
    kind: str
    subtype: str | None
    start: int
    payload_start: int
    payload_end: int
    end: int = NOT_FOUND

    @property
    def has_payload(self) -> bool:
        return self.payload_start != NOT_FOUND and self.payload_end != NOT_FOUND

    @property
    def is_bounded(self) -> bool:
        return self.has_payload and self.end != NOT_FOUND

    def payload(self, text: str) -> str:
        return text[self.payload_start : self.payload_end + 1]


class MessageParser:
    """Best-effort extraction of CHART, TABLE and ACTION directives. Never raises."""

    def __init__(self, log: ParserLogger = logger):
        self.log = log

    # ── Locating ─────────────────────────────────────────────────────

    def find_markers(self, text: str) -> list[DirectiveMarker]:
        """Every directive prefix in source order, bounded or not."""
        candidates: list[DirectiveMarker] = []
        for kind, pattern in MARKER_PATTERNS.items():
            for match in pattern.finditer(text):
                subtype = match.group(1).lower() if match.groups() else None
                candidates.append(self._bound(text, kind, subtype, match))

        candidates.sort(key=lambda m: m.start)

        markers: list[DirectiveMarker] = []
        covered_until = NOT_FOUND
        for marker in candidates:
            if marker.start <= covered_until:
                continue
            markers.append(marker)
            # prefixes quoted inside a payload belong to that payload
            if marker.has_payload:
                covered_until = max(marker.payload_end, marker.end)
        return markers

    def _bound(
        self, text: str, kind: str, subtype: str | None, match: re.Match
    ) -> DirectiveMarker:
        after_prefix = match.end()
        next_prefix = ANY_MARKER_PREFIX.search(text, after_prefix)
        limit = next_prefix.start() if next_prefix else len(text)

        payload_start = text.find("{", after_prefix, limit)
        payload_end = (
            find_matching_brace(text, payload_start)
            if payload_start != NOT_FOUND
            else NOT_FOUND
        )
        return DirectiveMarker(
            kind=kind,
            subtype=subtype,
            start=match.start(),
            payload_start=payload_start,
            payload_end=payload_end,
            end=_closing_bracket(text, payload_end),
        )

    # ── Extraction ───────────────────────────────────────────────────

    def extract_directives(self, text: str) -> ParseResult:
        result = ParseResult()

        for marker in self.find_markers(text):
            directive = self._decode(text, marker)
            if directive is None:
                continue
            if isinstance(directive, ChartDirective):
                result.charts.append(directive)
            elif isinstance(directive, TableDirective):
                result.tables.append(directive)
            else:
                result.action_buttons.append(directive)

        self.log.debug(
            "Extracted {} chart(s), {} table(s), {} action(s)",
            len(result.charts),
            len(result.tables),
            len(result.action_buttons),
        )
        return result

    def _decode(self, text: str, marker: DirectiveMarker) -> BaseModel | None:
        if marker.payload_start == NOT_FOUND:
            self.log.warning(
                "No JSON payload for {} marker at position {}", marker.kind, marker.start
            )
            return None
        if marker.payload_end == NOT_FOUND:
            self.log.warning(
                "Unbalanced braces in {} marker at position {}", marker.kind, marker.start
            )
            return None
        if marker.end == NOT_FOUND:
            self.log.warning(
                "Missing closing bracket for {} marker at position {}",
                marker.kind,
                marker.start,
            )
            return None

        try:
            payload = json.loads(marker.payload(text))
        except json.JSONDecodeError as e:
            self.log.warning(
                "Invalid JSON in {} marker at position {}: {}", marker.kind, marker.start, e
            )
            return None

        try:
            if marker.kind == CHART:
                return ChartDirective.model_validate({**payload, "type": marker.subtype})
            if marker.kind == ACTION:
                return ActionDirective.model_validate(
                    {**payload, "action_type": marker.subtype}
                )
            return TableDirective.model_validate(payload)
        except ValidationError as e:
            self.log.warning(
                "Unexpected {} payload at position {}: {} error(s)",
                marker.kind,
                marker.start,
                e.error_count(),
            )
            return None

    # ── Stripping ────────────────────────────────────────────────────

    def strip_directives(self, text: str) -> str:
        """
        Remove every marker whose span can be bounded, valid JSON or not.

        Only markers without a balanced payload fall back to the first ``]``
        at depth zero.
        """
        spans: list[tuple[int, int]] = []
        covered_until = NOT_FOUND

        for marker in self.find_markers(text):
            if marker.start <= covered_until:
                continue
            end = marker.end
            if not marker.has_payload:
                end = find_marker_end(text, marker.start)
            if end == NOT_FOUND:
                self.log.warning(
                    "Unterminated {} marker at position {}, left in text",
                    marker.kind,
                    marker.start,
                )
                continue
            spans.append((marker.start, end + 1))
            covered_until = end

        result = text
        # right to left keeps earlier offsets valid
        for start, end in reversed(spans):
            result = _cut(result, start, end)

        return EXCESS_NEWLINES.sub("\n\n", result).strip()

    # ── Combined ─────────────────────────────────────────────────────

    def parse_message(self, text: str) -> ParsedMessage:
        return ParsedMessage(
            content=self.strip_directives(text),
            metadata=self.extract_directives(text),
            raw=text,
        )

    def validate_marker_json(self, text: str) -> bool:
        """True when every marker in ``text`` is bounded and carries valid JSON."""
        for marker in self.find_markers(text):
            if not marker.is_bounded:
                return False
            try:
                json.loads(marker.payload(text))
            except json.JSONDecodeError:
                return False
        return True


def _closing_bracket(text: str, payload_end: int) -> int:
    """Offset of the ``]`` after a payload, allowing whitespace in between."""
    if payload_end == NOT_FOUND:
        return NOT_FOUND
    i = payload_end + 1
    while i < len(text) and text[i].isspace():
        i += 1
    if i < len(text) and text[i] == "]":
        return i
    return NOT_FOUND


def _cut(text: str, start: int, end: int) -> str:
    """Remove ``text[start:end]`` without leaving a double space at the seam."""
    left, right = text[:start], text[end:]
    if left.endswith((" ", "\t")) and right.startswith((" ", "\t")):
        right = right.lstrip(HORIZONTAL_SPACE)
    return left + right


_default_parser = MessageParser()


def extract_directives(text: str) -> ParseResult:
    return _default_parser.extract_directives(text)


def strip_directives(text: str) -> str:
    return _default_parser.strip_directives(text)


def parse_message(text: str) -> ParsedMessage:
    return _default_parser.parse_message(text)
