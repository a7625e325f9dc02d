"""Identifier and literal classification.

Every name that reaches generated code goes through these checks first:
loop variables and macro parameters must be short names, include/import
targets and ``for`` iterables must be names or literals, block names have
their own stricter pattern.

Reserved Names:
    Python keywords (``class``, ``for``, ``None``, ...) and the template
    literals ``true``/``false``/``null`` cannot start a lookup chain. Names
    starting with two underscores are reserved for the runtime.
"""

from __future__ import annotations

import keyword
import re

from swiglet.environment.exceptions import ErrorCode, TemplateSyntaxError

RESERVED_NAMES: frozenset[str] = frozenset(keyword.kwlist) | frozenset(
    {"true", "false", "null", "none", "undefined"}
)

_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")
_STRING_RE = re.compile(r"""^(['"]).*\1$""", re.DOTALL)
_SHORT_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")
_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*(\.[A-Za-z_][A-Za-z_0-9]*)*$")
_BLOCK_NAME_RE = re.compile(r"^[A-Za-z]+[A-Za-z_0-9]*$")


def is_number_literal(text: str) -> bool:
    return bool(_NUMBER_RE.match(text))


def is_string_literal(text: str) -> bool:
    """True for a quoted string literal.

    Raises:
        TemplateSyntaxError: If the quote character appears unescaped inside.
    """
    if len(text) < 2 or not _STRING_RE.match(text):
        return False
    quote = text[0]
    body = text[1:-1]
    escaped = False
    for char in body:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == quote:
            raise TemplateSyntaxError(
                f"Invalid string literal. Unescaped quote ({quote}) found.",
                code=ErrorCode.INVALID_NAME,
            )
    return True


def is_literal(text: str) -> bool:
    """True for number and quoted string literals."""
    return is_number_literal(text) or is_string_literal(text)


def _is_reserved(first_segment: str) -> bool:
    return first_segment.startswith("__") or first_segment in RESERVED_NAMES


def is_valid_name(text: str) -> bool:
    """True for a dotted identifier chain such as ``user.address.city``."""
    if not _NAME_RE.match(text):
        return False
    return not _is_reserved(text.split(".", 1)[0])


def is_valid_short_name(text: str) -> bool:
    """True for a single identifier usable as a loop variable or parameter."""
    return bool(_SHORT_NAME_RE.match(text)) and not _is_reserved(text)


def is_valid_block_name(text: str) -> bool:
    return bool(_BLOCK_NAME_RE.match(text))


def sanitize_name(text: str) -> str:
    """Collapse a chain to the flat key imported macros are stored under.

    ``forms.input`` -> ``forms_input``, matching ``{% import ... as forms %}``.
    """
    return re.sub(r"\W", "_", text)


def unquote(text: str) -> str:
    """Strip the quotes of a string literal and resolve backslash escapes."""
    body = text[1:-1]
    if "\\" not in body:
        return body
    out: list[str] = []
    chars = iter(body)
    for char in chars:
        if char == "\\":
            nxt = next(chars, "")
            out.append(_ESCAPES.get(nxt, nxt))
        else:
            out.append(char)
    return "".join(out)


_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}
