"""HTML and JavaScript-string escaping.

``Markup`` marks text as already safe: auto-escaping leaves it untouched.
Macro output is returned as ``Markup`` so calling a macro inside an escaped
``{{ }}`` does not escape its HTML a second time.

Escaping Rules:
    html: ``&`` (unless it already starts ``&amp;``, ``&lt;``, ``&gt;``,
    ``&quot;`` or ``&#39;``), ``<``, ``>``, ``"`` and ``'``.

    js: control characters and ``\\ & < > ' " = - ;`` become ``\\uXXXX``.
"""

from __future__ import annotations

import re
from typing import Any

_AMP_RE = re.compile(r"&(?!amp;|lt;|gt;|quot;|#39;)")
_HTML_TABLE = str.maketrans({"<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"})

_JS_SPECIAL = "\\&<>'\"=-;"
_JS_TABLE = str.maketrans(
    {
        **{chr(i): f"\\u{i:04X}" for i in range(32)},
        **{c: f"\\u{ord(c):04X}" for c in _JS_SPECIAL},
    }
)


class Markup(str):
    """String that is safe to emit without escaping."""

    __slots__ = ()

    def __new__(cls, value: Any = "") -> Markup:
        return super().__new__(cls, value)

    def __html__(self) -> Markup:
        return self

    def __add__(self, other: str) -> Markup:
        return Markup(str.__add__(self, other))

    def __repr__(self) -> str:
        return f"Markup({str.__repr__(self)})"


def html_escape(value: str) -> str:
    """Escape ``value`` for HTML text and attribute context.

    Existing entities produced by a previous escape pass are kept, so
    escaping twice gives the same result as escaping once.
    """
    return _AMP_RE.sub("&amp;", value).translate(_HTML_TABLE)


def js_escape(value: str) -> str:
    """Escape ``value`` for use inside a JavaScript string literal."""
    return value.translate(_JS_TABLE)


def escape(value: Any, kind: str | None = "html", force: bool = False) -> Any:
    """Escape strings with the named escaper; other values pass through.

    ``Markup`` is returned unchanged unless ``force`` is set, as it is for
    an explicit ``escape`` filter.
    """
    if not isinstance(value, str):
        return value
    if isinstance(value, Markup):
        if not force:
            return value
        value = str(value)
    if kind == "js":
        return js_escape(value)
    return html_escape(value)
