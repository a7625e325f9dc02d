"""Expression compilation for swiglet compiler.

Provides mixin for compiling expression nodes (literals, lookups, filter
chains and ``if`` conditions) to Python AST expressions.

Comparisons go through the runtime helpers so template semantics hold for
mixed value kinds:

    ```
    a == b    ->  _loose_eq(a, b)
    a !== b   ->  not _strict_eq(a, b)
    a < b     ->  _compare('<', a, b)
    a in b    ->  _contains(a, b)
    ```

"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from swiglet.compiler.utils import call, const, load
from swiglet.nodes import (
    BoolOp,
    Compare,
    Const,
    DictLiteral,
    Filtered,
    ListLiteral,
    Name,
    Not,
    Variable,
)

if TYPE_CHECKING:
    from swiglet.environment.core import Environment
    from swiglet.nodes import Expr, Filter


class ExpressionCompilationMixin:
    """Mixin for compiling expressions.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _env: Environment

        # From NameCompilationMixin
        def _compile_name(self, node: Name) -> ast.expr: ...
        def _compile_call(self, node: Name, args: tuple[Expr, ...]) -> ast.expr: ...

    def _compile_expr(self, node: Any) -> ast.expr:
        """Compile an expression node to a Python expression."""
        if isinstance(node, Const):
            return const(node.value)
        if isinstance(node, Name):
            return self._compile_name(node)
        if isinstance(node, Variable):
            return self._compile_variable(node)
        if isinstance(node, Filtered):
            return self._apply_filters(self._compile_expr(node.value), node.filters)
        if isinstance(node, ListLiteral):
            return ast.List(elts=[self._compile_expr(item) for item in node.items], ctx=ast.Load())
        if isinstance(node, DictLiteral):
            return ast.Dict(
                keys=[const(key) for key in node.keys],
                values=[self._compile_expr(value) for value in node.values],
            )
        if isinstance(node, Not):
            return ast.UnaryOp(op=ast.Not(), operand=self._compile_expr(node.operand))
        if isinstance(node, BoolOp):
            return ast.BoolOp(
                op=ast.And() if node.op == "and" else ast.Or(),
                values=[self._compile_expr(node.left), self._compile_expr(node.right)],
            )
        if isinstance(node, Compare):
            return self._compile_compare(node)
        raise TypeError(f"Cannot compile expression node {type(node).__name__}")

    def _compile_variable(self, node: Variable) -> ast.expr:
        """Compile a ``{{ }}`` / ``set`` value: optional call, then filters."""
        value = node.value
        if isinstance(value, Name):
            expr = self._compile_call(value, node.args or ())
        else:
            expr = self._compile_expr(value)
        return self._apply_filters(expr, node.filters)

    def _apply_filters(self, expr: ast.expr, filters: tuple[Filter, ...]) -> ast.expr:
        """Wrap ``expr`` in ``_filters['name'](expr, *args)`` calls, left to right.

        Filters missing from the registry are dropped, so a template using a
        filter registered later still compiles.
        """
        registry = self._env.filters
        for flt in filters:
            if flt.name not in registry:
                continue
            expr = call(
                ast.Subscript(value=load("_filters"), slice=const(flt.name), ctx=ast.Load()),
                expr,
                *(self._compile_expr(arg) for arg in flt.args),
            )
        return expr

    def _compile_compare(self, node: Compare) -> ast.expr:
        left = self._compile_expr(node.left)
        right = self._compile_expr(node.right)
        op = node.op
        if op in ("==", "!="):
            expr: ast.expr = call("_loose_eq", left, right)
        elif op in ("===", "!=="):
            expr = call("_strict_eq", left, right)
        elif op == "in":
            return call("_contains", left, right)
        else:
            return call("_compare", const(op), left, right)
        if op.startswith("!"):
            return ast.UnaryOp(op=ast.Not(), operand=expr)
        return expr
