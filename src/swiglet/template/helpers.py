"""Pure runtime helper functions injected into the template namespace.

These functions are called by compiled template code at render time.
None of them close over Environment state: they use only their
parameters.

Undefined Values:
A lookup that fails anywhere along its chain yields ``UNDEFINED`` rather
than raising. ``UNDEFINED`` is falsy, iterates as empty and renders as
``""``, so templates can test and print missing data freely.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any

from swiglet.render_context import get_render_context
from swiglet.template.loop_context import LoopContext
from swiglet.utils.html import Markup, escape


class _Undefined:
    """Singleton for values missing from every scope."""

    __slots__ = ()
    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return ""

    def __iter__(self):
        return iter(())

    def __len__(self) -> int:
        return 0

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


# =============================================================================
# Lookups
# =============================================================================


def get_item(obj: Any, key: Any) -> Any:
    """One step of a lookup chain: ``obj.key`` / ``obj[key]``.

    Mappings are subscripted, sequences indexed (integers or digit
    strings; ``length`` gives the size), anything else is read by
    attribute. Private attributes are never reachable.
    """
    if obj is UNDEFINED or obj is None or key is UNDEFINED:
        return UNDEFINED
    if isinstance(obj, Mapping):
        try:
            return obj[key]
        except (KeyError, TypeError):
            if isinstance(key, (int, float)) and not isinstance(key, bool):
                return obj.get(_number_key(key), UNDEFINED)
            return UNDEFINED
    if isinstance(obj, (list, tuple, str)):
        if key == "length":
            return len(obj)
        index = _as_index(key)
        if index is None or not -len(obj) <= index < len(obj):
            return UNDEFINED
        return obj[index]
    if not isinstance(key, str) or key.startswith("_"):
        return UNDEFINED
    return getattr(obj, key, UNDEFINED)


def _as_index(key: Any) -> int | None:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, float) and key.is_integer():
        return int(key)
    if isinstance(key, str) and key.lstrip("-").isdigit():
        return int(key)
    return None


def _number_key(key: int | float) -> str:
    return str(int(key)) if float(key).is_integer() else str(key)


def resolve(value: Any, path: tuple[Any, ...]) -> Any:
    """Follow ``path`` from ``value``; UNDEFINED unless every step exists."""
    for key in path:
        value = get_item(value, key)
        if value is UNDEFINED:
            return UNDEFINED
    return value


def lookup(ctx: Mapping[str, Any], root: str, path: tuple[Any, ...], ambient: Any = UNDEFINED) -> Any:
    """Two-tier lookup of ``root.path``.

    The ambient value (a loop or macro local, or an environment global) is
    tried first; when the chain is undefined there, it is resolved again
    against the data context.
    """
    if ambient is not UNDEFINED:
        value = resolve(ambient, path)
        if value is not UNDEFINED:
            return value
    return resolve(ctx.get(root, UNDEFINED), path)


def output_value(
    ctx: Mapping[str, Any],
    flat_name: str | None,
    root: str,
    path: tuple[Any, ...],
    ambient: Any,
    args: tuple[Any, ...],
) -> Any:
    """Value of a ``{{ }}`` expression, calling it if it is a function.

    In order: a callable stored in the context under the flattened name
    (``forms.input`` -> ``forms_input``, how imported macros are stored)
    or at the chain; a callable reached through the ambient scope; the
    plain value.
    """
    func = ctx.get(flat_name, UNDEFINED) if flat_name else UNDEFINED
    if not callable(func):
        func = resolve(ctx.get(root, UNDEFINED), path)
    if callable(func):
        return func(*args)

    if ambient is not UNDEFINED:
        func = resolve(ambient, path)
        if callable(func):
            return func(*args)
        if func is not UNDEFINED:
            return func
    return resolve(ctx.get(root, UNDEFINED), path)


def set_path(ctx: MutableMapping[str, Any], names: tuple[str, ...], value: Any) -> None:
    """Assign ``value`` at a dotted name, creating nested dicts as needed."""
    target: Any = ctx
    for name in names[:-1]:
        nxt = target.get(name) if isinstance(target, Mapping) else None
        if not isinstance(nxt, MutableMapping):
            nxt = {}
            target[name] = nxt
        target = nxt
    target[names[-1]] = value


# =============================================================================
# Iteration
# =============================================================================


def loop_items(value: Any) -> list[tuple[Any, Any]]:
    """(key, item) pairs for ``{% for %}``.

    Sequences pair each item with its index, mappings each value with its
    key. Strings, scalars and undefined values give no iterations.
    """
    if isinstance(value, Mapping):
        return list(value.items())
    if value is None or value is UNDEFINED or isinstance(value, (str, bytes)):
        return []
    if isinstance(value, Iterable):
        return list(enumerate(value))
    return []


# =============================================================================
# Comparisons
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        return float(text)
    if value is None:
        return 0.0
    return math.nan


def loose_equals(left: Any, right: Any) -> bool:
    """``==``: numbers, numeric strings and booleans compare by value."""
    if left is right:
        return True
    missing = (None, UNDEFINED)
    if left in missing or right in missing:
        return left in missing and right in missing
    if type(left) is type(right) or (_is_number(left) and _is_number(right)):
        return bool(left == right)
    scalars = (str, int, float, bool)
    if isinstance(left, scalars) and isinstance(right, scalars):
        if isinstance(left, str) and isinstance(right, str):
            return left == right
        try:
            return _to_number(left) == _to_number(right)
        except ValueError:
            return False
    return bool(left == right)


def strict_equals(left: Any, right: Any) -> bool:
    """``===``: equal value and kind (all numbers are one kind)."""
    if _is_number(left) and _is_number(right):
        return bool(left == right)
    return type(left) is type(right) and bool(left == right)


def compare(op: str, left: Any, right: Any) -> bool:
    """Ordering comparison; mixed kinds fall back to numeric comparison."""
    try:
        if op == "<":
            return bool(left < right)
        if op == ">":
            return bool(left > right)
        if op == "<=":
            return bool(left <= right)
        return bool(left >= right)
    except TypeError:
        pass
    try:
        a, b = _to_number(left), _to_number(right)
    except ValueError:
        return False
    if op == "<":
        return a < b
    if op == ">":
        return a > b
    if op == "<=":
        return a <= b
    return a >= b


def contains(item: Any, container: Any) -> bool:
    """``in``: key membership for mappings, membership for sequences."""
    if isinstance(container, Mapping):
        try:
            return item in container
        except TypeError:
            return False
    if isinstance(container, str):
        return isinstance(item, str) and item in container
    if isinstance(container, (list, tuple, set, frozenset)):
        return any(loose_equals(item, candidate) for candidate in container)
    return False


# =============================================================================
# Output
# =============================================================================


def to_str(value: Any) -> str:
    """Render a value as output text.

    Undefined and None render empty, booleans as ``true``/``false``, lists
    as comma-separated items. Strings (``Markup`` included) are returned
    as-is.
    """
    if isinstance(value, str):
        return value
    if value is None or value is UNDEFINED:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(to_str(item) for item in value)
    return str(value)


# =============================================================================
# Shared Base Namespace
# =============================================================================
# Static entries shared across all Template instances. Copied once per
# Template.__init__. Read-only after module load.
# =============================================================================

STATIC_NAMESPACE: dict[str, Any] = {
    "__builtins__": {},
    "_Markup": Markup,
    "_UNDEFINED": UNDEFINED,
    "_callable": callable,
    "_escape": escape,
    "_to_str": to_str,
    "_get_item": get_item,
    "_lookup": lookup,
    "_output_value": output_value,
    "_set_path": set_path,
    "_LoopContext": LoopContext,
    "_loop_items": loop_items,
    "_loose_eq": loose_equals,
    "_strict_eq": strict_equals,
    "_compare": compare,
    "_contains": contains,
    "_get_render_ctx": get_render_context,
}
