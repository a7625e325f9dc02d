"""Variable assignment compilation for swiglet compiler.

Provides mixin for compiling ``{% set %}``.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from swiglet.analysis.names import is_valid_name
from swiglet.compiler.utils import call, const, load
from swiglet.environment.exceptions import ErrorCode, TemplateSyntaxError
from swiglet.parser.expressions import parse_variable

if TYPE_CHECKING:
    from swiglet.nodes import Tag


class VariableAssignmentMixin:
    """Mixin for compiling variable assignment statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # From ExpressionCompilationMixin
        def _compile_variable(self, node: Any) -> ast.expr: ...

    def _compile_set(self, tag: Tag) -> list[ast.stmt]:
        """Compile ``{% set name = value %}``.

        The value is a literal, a list or object literal, or a lookup chain
        with optional call arguments and filters. It is stored unescaped.
        A dotted name assigns into nested mappings, creating them as needed:

            {% set page.title = "Home" %}  ->  _set_path(ctx, ('page', 'title'), 'Home')
        """
        args = tag.args
        if len(args) < 3 or args[1] != "=":
            raise TemplateSyntaxError(
                f'Invalid token "{args[1] if len(args) > 1 else ""}" in "set" tag '
                f'on line {tag.lineno}. Missing "=".',
                tag.lineno,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        name = args[0]
        if not is_valid_name(name):
            raise TemplateSyntaxError(
                f'Invalid variable name "{name}" in "set" tag on line {tag.lineno}.',
                tag.lineno,
                code=ErrorCode.INVALID_NAME,
            )

        value = self._compile_variable(parse_variable(" ".join(args[2:]), tag.lineno))
        names = name.split(".")
        if len(names) > 1:
            path = ast.Tuple(elts=[const(n) for n in names], ctx=ast.Load())
            return [ast.Expr(value=call("_set_path", load("ctx"), path, value))]
        return [
            ast.Assign(
                targets=[ast.Subscript(value=load("ctx"), slice=const(name), ctx=ast.Store())],
                value=value,
            )
        ]
