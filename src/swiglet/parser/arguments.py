"""Tag argument scanning.

Tag arguments arrive as whitespace-separated words. Quoted strings,
``[...]`` lists and ``{...}`` objects may contain spaces, so the words are
regrouped into logical arguments first:

    {% set user = {"name": "Ada Lovelace", "tags": [1, 2]} %}
    -> ['user', '=', '{"name": "Ada Lovelace", "tags": [1, 2]}']
"""

from __future__ import annotations

_CLOSERS = {"[": "]", "{": "}"}


class MalformedArguments(ValueError):
    """An argument opened a quote or bracket that never closes."""


def regroup_args(text: str) -> list[str]:
    """Split ``text`` on whitespace outside quotes, brackets and braces.

    Parentheses are left alone: ``if`` conditions attach them to words.

    Raises:
        MalformedArguments: On an unterminated quote, list or object.
    """
    args: list[str] = []
    current: list[str] = []
    quote: str | None = None
    closers: list[str] = []
    escaped = False

    for char in text:
        if quote:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in "'\"":
            quote = char
        elif char in _CLOSERS:
            closers.append(_CLOSERS[char])
        elif closers and char == closers[-1]:
            closers.pop()
        elif char.isspace() and not closers:
            if current:
                args.append("".join(current))
                current = []
            continue
        current.append(char)

    if quote or closers:
        raise MalformedArguments(text)
    if current:
        args.append("".join(current))
    return args

