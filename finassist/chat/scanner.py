"""Brace-depth scanning over JSON embedded in free text."""

from enum import Enum

NOT_FOUND = -1


class ScanState(Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


def _step(state: ScanState, char: str) -> ScanState:
    """Advance the string/escape state by one character."""
    if state is ScanState.ESCAPED:
        return ScanState.IN_STRING
    if state is ScanState.IN_STRING:
        if char == "\\":
            return ScanState.ESCAPED
        if char == '"':
            return ScanState.NORMAL
        return ScanState.IN_STRING
    if char == '"':
        return ScanState.IN_STRING
    return ScanState.NORMAL


def find_matching_brace(text: str, start: int) -> int:
    """Offset of the ``}`` closing the ``{`` at ``start``, or ``NOT_FOUND``."""
    if start < 0 or start >= len(text) or text[start] != "{":
        return NOT_FOUND

    state = ScanState.NORMAL
    depth = 0

    for i in range(start, len(text)):
        char = text[i]

        if state is not ScanState.NORMAL:
            state = _step(state, char)
            continue

        if char == '"':
            state = ScanState.IN_STRING
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i

    return NOT_FOUND


def find_marker_end(text: str, start: int) -> int:
    """First ``]`` outside a string at brace depth zero, or ``NOT_FOUND``."""
    state = ScanState.NORMAL
    depth = 0

    for i in range(max(start, 0), len(text)):
        char = text[i]

        if state is not ScanState.NORMAL:
            state = _step(state, char)
            continue

        if char == '"':
            state = ScanState.IN_STRING
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        elif char == "]" and depth == 0:
            return i

    return NOT_FOUND
