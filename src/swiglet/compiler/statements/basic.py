"""Basic statement compilation for swiglet compiler.

Provides mixin for compiling basic output statements (data, output).

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from swiglet.compiler.utils import call, const, load
from swiglet.nodes import Const, Data, Output
from swiglet.template.helpers import to_str
from swiglet.utils.html import escape


class BasicStatementMixin:
    """Mixin for compiling basic output statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # From ExpressionCompilationMixin
        def _compile_variable(self, node: Any) -> ast.expr: ...

        # From Compiler core
        def emit_output(self, value_expr: ast.expr) -> ast.stmt: ...

    def _compile_data(self, node: Data) -> list[ast.stmt]:
        """Compile literal text: ``_append("literal text")``"""
        if not node.value:
            return []
        return [self.emit_output(const(node.value))]

    def _compile_output(self, node: Output) -> list[ast.stmt]:
        """Compile ``{{ expression }}`` output.

        Generates ``_append(_e(_s(value), kind))`` when the token's escape
        type is set, ``_append(_s(value))`` otherwise. An explicit
        ``escape`` filter passes ``True`` so ``Markup`` is escaped as well. Plain literals are
        stringified and escaped at compile time.
        """
        variable = node.value
        if isinstance(variable.value, Const) and variable.args is None and not variable.filters:
            text = to_str(variable.value.value)
            if node.escape:
                text = escape(text, node.escape)
            return [self.emit_output(const(str(text)))] if text else []

        expr = call("_s", self._compile_variable(variable))
        if node.escape and node.explicit:
            expr = call(load("_e"), expr, const(node.escape), const(True))
        elif node.escape:
            expr = call(load("_e"), expr, const(node.escape))
        return [self.emit_output(expr)]
