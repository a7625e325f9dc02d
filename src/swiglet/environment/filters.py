"""Built-in filters for swiglet templates.

Filters transform values in ``{{ value|filter(args) }}``, in ``set``
values and in ``{% filter name %}`` blocks. Each receives the current value
first, then its own arguments.

Filters are total: an input of the wrong shape gives ``""`` (or the input
unchanged, where noted) instead of raising.

Categories:
**Strings**: `addslashes`, `capitalize`, `lower`, `upper`, `title`,
    `striptags`, `replace`, `url_encode`, `url_decode`. The case and
    tag filters map over lists and dict values.

**Collections**: `first`, `last`, `join`, `length`, `reverse`, `uniq`

**Values**: `add`, `default`, `date`, `escape` / `e`, `json_encode`

Custom Filters:
    >>> env = Environment(filters={"shout": lambda v: f"{v}!"})
    >>> env.compile("{{ name|shout }}").render({"name": "hi"})
    'hi!'

"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote, unquote

from swiglet.template.helpers import UNDEFINED, to_str
from swiglet.utils.dateformat import format_date
from swiglet.utils.html import escape

_TAG_RE = re.compile(r"<[^>]+>")
_WORD_RE = re.compile(r"\w\S*")
_REPLACEMENT_RE = re.compile(r"\$(\$|&|\d{1,2})")
_URI_SAFE = "-_.!~*'()"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _map_strings(func: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Apply a string transform to a value, each list item or each dict value."""

    def apply(value: Any) -> Any:
        if isinstance(value, Mapping):
            return {k: apply(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [apply(v) for v in value]
        return func(to_str(value))

    apply.__name__ = func.__name__
    apply.__doc__ = func.__doc__
    return apply


# =============================================================================
# Strings
# =============================================================================


@_map_strings
def _filter_addslashes(value: str) -> str:
    """Backslash-escape backslashes and quotes."""
    return value.replace("\\", "\\\\").replace("'", "\\'").replace('"', '\\"')


@_map_strings
def _filter_capitalize(value: str) -> str:
    return value[:1].upper() + value[1:].lower()


@_map_strings
def _filter_lower(value: str) -> str:
    return value.lower()


@_map_strings
def _filter_upper(value: str) -> str:
    return value.upper()


@_map_strings
def _filter_title(value: str) -> str:
    """Capitalize each word, lowercasing the rest of it."""
    return _WORD_RE.sub(lambda m: m.group()[:1].upper() + m.group()[1:].lower(), value)


@_map_strings
def _filter_striptags(value: str) -> str:
    return _TAG_RE.sub("", value)


def _filter_replace(value: Any, search: Any, replacement: Any = "", flags: Any = "") -> str:
    """Regular expression replace.

    Flags: ``g`` replaces every match (otherwise only the first), ``i``
    ignores case, ``m`` makes ``^``/``$`` match at line breaks. In the
    replacement ``$1`` inserts a group, ``$&`` the whole match and ``$$`` a
    dollar sign.

    Example:
        {{ "a-b-c"|replace("-", "+", "g") }} -> a+b+c
    """
    flags = to_str(flags)
    re_flags = 0
    if "i" in flags:
        re_flags |= re.IGNORECASE
    if "m" in flags:
        re_flags |= re.MULTILINE
    try:
        pattern = re.compile(to_str(search), re_flags)
    except re.error:
        return to_str(value)
    template = to_str(replacement)

    def expand(match: re.Match[str]) -> str:
        def group(ref: re.Match[str]) -> str:
            token = ref.group(1)
            if token == "$":
                return "$"
            if token == "&":
                return match.group(0)
            index = int(token)
            if index > (pattern.groups or 0):
                return ref.group(0)
            return match.group(index) or ""

        return _REPLACEMENT_RE.sub(group, template)

    return pattern.sub(expand, to_str(value), count=0 if "g" in flags else 1)


def _filter_url_encode(value: Any) -> str:
    """Percent-encode everything but ``A-Z a-z 0-9 - _ . ! ~ * ' ( )``."""
    return quote(to_str(value), safe=_URI_SAFE)


def _filter_url_decode(value: Any) -> str:
    return unquote(to_str(value))


# =============================================================================
# Collections
# =============================================================================


def _filter_first(value: Any) -> Any:
    """First item of a list or first character of a string."""
    if isinstance(value, (list, tuple, str)) and value:
        return value[0]
    return ""


def _filter_last(value: Any) -> Any:
    """Last item of a list or last character of a string."""
    if isinstance(value, (list, tuple, str)) and value:
        return value[-1]
    return ""


def _filter_join(value: Any, separator: Any = ",") -> Any:
    """Join list items, or mapping values, into a string.

    Other inputs are returned unchanged.
    """
    if isinstance(value, Mapping):
        value = list(value.values())
    if isinstance(value, (list, tuple)):
        return to_str(separator).join(to_str(item) for item in value)
    return value


def _filter_length(value: Any) -> Any:
    if isinstance(value, (list, tuple, str, Mapping)):
        return len(value)
    return ""


def _filter_reverse(value: Any) -> Any:
    """Reversed copy of a list; anything else is returned unchanged."""
    if isinstance(value, (list, tuple)):
        return list(reversed(value))
    return value


def _filter_uniq(value: Any) -> Any:
    """Unique items of a list, first occurrence kept."""
    if not isinstance(value, (list, tuple)):
        return ""
    out: list[Any] = []
    seen: set[Any] = set()
    for item in value:
        try:
            if item in seen:
                continue
            seen.add(item)
        except TypeError:
            if item in out:
                continue
        out.append(item)
    return out


# =============================================================================
# Values
# =============================================================================


def _filter_add(value: Any, addend: Any = "") -> Any:
    """Concatenate lists, merge mappings, add numbers or join as strings."""
    if isinstance(value, (list, tuple)) and isinstance(addend, (list, tuple)):
        return [*value, *addend]
    if isinstance(value, Mapping) and isinstance(addend, Mapping):
        return {**value, **addend}
    if _is_number(value) and _is_number(addend):
        return value + addend
    return to_str(value) + to_str(addend)


def _filter_default(value: Any, default: Any = "") -> Any:
    """The value if it is defined and truthy (or a number), else ``default``."""
    if value is not UNDEFINED and (value or _is_number(value)):
        return value
    return default


def _filter_escape(value: Any, kind: Any = "html") -> Any:
    """HTML-escape strings (``kind="js"`` for JavaScript strings)."""
    return escape(value, "js" if kind == "js" else "html", force=True)


def _filter_json_encode(value: Any, indent: Any = None) -> str:
    """JSON text. Compact without ``indent``, pretty-printed with it."""
    if _is_number(indent) and indent:
        return json.dumps(value, indent=int(indent), ensure_ascii=False, default=to_str)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=to_str)


def make_date_filter(default_offset: float = 0) -> Callable[..., str]:
    """Build the ``date`` filter with an environment's default offset."""

    def _filter_date(value: Any, fmt: Any = "", offset: Any = None, abbr: Any = None) -> str:
        """Format a date: ``{{ created|date("Y-m-d") }}``.

        ``offset`` is minutes west of UTC and defaults to the environment's
        ``tz_offset``. Values that are not dates render as ``""``.
        """
        if offset is None or offset is UNDEFINED or offset == "":
            offset = default_offset
        try:
            return format_date(value, to_str(fmt), float(offset), to_str(abbr) or None)
        except (TypeError, ValueError, OverflowError):
            return ""

    return _filter_date


DEFAULT_FILTERS: dict[str, Callable[..., Any]] = {
    "add": _filter_add,
    "addslashes": _filter_addslashes,
    "capitalize": _filter_capitalize,
    "date": make_date_filter(),
    "default": _filter_default,
    "e": _filter_escape,
    "escape": _filter_escape,
    "first": _filter_first,
    "join": _filter_join,
    "json_encode": _filter_json_encode,
    "last": _filter_last,
    "length": _filter_length,
    "lower": _filter_lower,
    "replace": _filter_replace,
    "reverse": _filter_reverse,
    "striptags": _filter_striptags,
    "title": _filter_title,
    "uniq": _filter_uniq,
    "upper": _filter_upper,
    "url_decode": _filter_url_decode,
    "url_encode": _filter_url_encode,
}
