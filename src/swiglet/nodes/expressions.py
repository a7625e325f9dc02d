"""Expression nodes: values, lookup chains, filters and conditions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from swiglet.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Expr(Node):
    """Base class for expressions."""


@dataclass(frozen=True, slots=True)
class Const(Expr):
    """Literal value: string, number, true/false/null."""

    value: Any


@dataclass(frozen=True, slots=True)
class Name(Expr):
    """Property-access chain: ``a.b[c]["d"][0]``.

    ``path`` holds one expression per segment after the root. Static keys
    and indices are ``Const``; ``a[c]`` stores the nested lookup for ``c``.
    """

    root: str
    path: tuple[Expr, ...]
    source: str


@dataclass(frozen=True, slots=True)
class ListLiteral(Expr):
    """List literal: ``[1, "a", b]``"""

    items: tuple[Expr, ...]


@dataclass(frozen=True, slots=True)
class DictLiteral(Expr):
    """Object literal: ``{"a": 1, b: c}``"""

    keys: tuple[str, ...]
    values: tuple[Expr, ...]


@dataclass(frozen=True, slots=True)
class Filter(Node):
    """Filter reference: name plus raw and parsed arguments."""

    name: str
    raw_args: str
    args: tuple[Expr, ...]


@dataclass(frozen=True, slots=True)
class Filtered(Expr):
    """Value piped through a filter chain: ``value|f1|f2(x)``"""

    value: Expr
    filters: tuple[Filter, ...]


@dataclass(frozen=True, slots=True)
class Variable(Expr):
    """Interpolated value with optional call arguments and filters.

    ``{{ greet("Bob")|upper }}`` has ``args=(Const("Bob"),)`` and one filter.
    ``args`` is None when the expression is not written as a call.
    """

    value: Expr
    args: tuple[Expr, ...] | None
    filters: tuple[Filter, ...]


@dataclass(frozen=True, slots=True)
class Not(Expr):
    """Negation: ``not x`` / ``!x``"""

    operand: Expr


@dataclass(frozen=True, slots=True)
class BoolOp(Expr):
    """Short-circuit boolean operation."""

    op: Literal["and", "or"]
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Compare(Expr):
    """Binary comparison (``in`` included)."""

    op: str
    left: Expr
    right: Expr
