"""Bracket-aware string helpers shared by the text-level inferencers.

None of these functions raise for odd input; they return ``None`` or an
empty result when the shape they look for is absent.
"""

from __future__ import annotations

import re

_OPENERS = "([{<"
_CLOSERS = ")]}>"

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _is_arrow(text: str, index: int) -> bool:
    """True when ``text[index]`` is the '>' of a '->' arrow."""
    return text[index] == ">" and index > 0 and text[index - 1] == "-"


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split ``text`` on ``sep`` outside any bracket pair.

    Parts are stripped; empty parts are kept so callers can decide.
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for i, ch in enumerate(text):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS and not _is_arrow(text, i):
            depth = max(depth - 1, 0)
        if ch == sep and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    parts.append("".join(current).strip())
    return parts


def encloses(text: str, open_ch: str, close_ch: str) -> bool:
    """True when the first character's matching bracket is the last character."""
    if len(text) < 2 or text[0] != open_ch or text[-1] != close_ch:
        return False
    depth = 0
    for i, ch in enumerate(text):
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return i == len(text) - 1
    return False


def mask_strings(line: str) -> str:
    """Blank out the contents of double-quoted literals, keeping offsets."""
    out: list[str] = []
    in_string = False
    escaped = False
    for ch in line:
        if in_string:
            if escaped:
                escaped = False
                out.append(" ")
            elif ch == "\\":
                escaped = True
                out.append(" ")
            elif ch == '"':
                in_string = False
                out.append(ch)
            else:
                out.append(" ")
        else:
            if ch == '"':
                in_string = True
            out.append(ch)
    return "".join(out)


def is_single_colon(text: str, index: int) -> bool:
    """True when ``text[index]`` is a ':' that is not half of '::'."""
    if text[index] != ":":
        return False
    if index > 0 and text[index - 1] == ":":
        return False
    return not (index + 1 < len(text) and text[index + 1] == ":")


def first_single_colon(text: str, start: int = 0) -> int | None:
    for i in range(start, len(text)):
        if is_single_colon(text, i):
            return i
    return None


def _is_assignment(text: str, index: int) -> bool:
    if text[index] != "=":
        return False
    prev = text[index - 1] if index > 0 else ""
    nxt = text[index + 1] if index + 1 < len(text) else ""
    return prev not in "=!<>+-*/%&|^" and nxt not in "=>"


def find_assignment(text: str, start: int = 0) -> int | None:
    """Index of the first plain ``=`` (not ``==``, ``=>``, ``<=``, ``+=``...)."""
    for i in range(start, len(text)):
        if _is_assignment(text, i):
            return i
    return None


def assignment_rhs(text: str) -> str | None:
    """Right-hand side of the first plain assignment, without the trailing ';'."""
    idx = find_assignment(text)
    if idx is None:
        return None
    rhs = text[idx + 1 :].strip()
    return rhs.rstrip(";").strip()


def find_binding_colon(text: str, start: int = 0) -> int | None:
    """Index of a type-annotation colon at bracket depth zero.

    The search stops at the first plain ``=`` or ``;`` so colons inside the
    initializer are never taken for an annotation.
    """
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS and not _is_arrow(text, i):
            depth -= 1
            if depth < 0:
                return None
        elif depth == 0:
            if ch == ";" or _is_assignment(text, i):
                return None
            if is_single_colon(text, i):
                return i
    return None


def annotation_at(text: str, colon: int) -> str | None:
    """Type text following the colon at ``colon``.

    Ends at a plain ``=``, a brace, or a ``;``, ``,`` or closing bracket that
    is not nested inside the type itself, so ``[u8; 4]`` stays whole.
    """
    depth = 0
    end = len(text)
    for i in range(colon + 1, len(text)):
        ch = text[i]
        if ch in "([<":
            depth += 1
        elif ch in ")]>" and not _is_arrow(text, i):
            if depth == 0:
                end = i
                break
            depth -= 1
        elif ch in "{}" or (depth == 0 and ch in ";,"):
            end = i
            break
        elif _is_assignment(text, i):
            end = i
            break
    annotation = text[colon + 1 : end].strip()
    return annotation or None


def leading_identifier(text: str) -> str | None:
    """The identifier at the start of ``text``, if any."""
    match = _IDENT_RE.match(text)
    return match.group(0) if match else None


def last_path_segment(path: str) -> str:
    return path.rsplit("::", 1)[-1].strip()


def strip_line_comment(masked: str) -> str:
    """Cut a ``//`` comment from a line whose strings are already masked."""
    idx = masked.find("//")
    return masked if idx < 0 else masked[:idx]
