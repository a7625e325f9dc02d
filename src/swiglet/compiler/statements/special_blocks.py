"""Special block statement compilation for swiglet compiler.

Provides mixin for compiling special block statements (filter, autoescape, raw).

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from swiglet.compiler.utils import assign, call, const, join_buffer, load
from swiglet.environment.exceptions import ErrorCode, TemplateSyntaxError

if TYPE_CHECKING:
    from swiglet.environment.core import Environment
    from swiglet.nodes import Tag


class SpecialBlockMixin:
    """Mixin for compiling special block statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # Host attributes (from Compiler.__init__)
        _env: Environment

        # From Compiler core
        def _compile_nodes(self, nodes: list[Any]) -> list[ast.stmt]: ...
        def compile_value(self, text: str, lineno: int = 0) -> ast.expr: ...
        def emit_output(self, value_expr: ast.expr) -> ast.stmt: ...
        def unique(self, prefix: str) -> str: ...

    def _compile_filter_block(self, tag: Tag) -> list[ast.stmt]:
        """Compile ``{% filter name args %}...{% endfilter %}``.

        The body renders into its own buffer; the joined text is piped
        through the filter and appended unescaped:

            _save_append_N = _append
            _filter_buf_N = []
            _append = _filter_buf_N.append
            ... body ...
            _append = _save_append_N
            _append(_s(_filters['name'](''.join(_filter_buf_N), *args)))

        An unknown filter name passes the text through unchanged.
        """
        if not tag.args:
            raise TemplateSyntaxError(
                f'Missing filter name for "filter" tag on line {tag.lineno}.',
                tag.lineno,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        name, *args = tag.args
        buf_name = self.unique("_filter_buf")
        save_name = self.unique("_save_append")

        stmts: list[ast.stmt] = [
            assign(save_name, load("_append")),
            assign(buf_name, ast.List(elts=[], ctx=ast.Load())),
            assign(
                "_append",
                ast.Attribute(value=load(buf_name), attr="append", ctx=ast.Load()),
            ),
            *self._compile_nodes(tag.trimmed_body()),
            assign("_append", load(save_name)),
        ]

        value: ast.expr = join_buffer(buf_name)
        if name in self._env.filters:
            value = call(
                ast.Subscript(value=load("_filters"), slice=const(name), ctx=ast.Load()),
                value,
                *(self.compile_value(arg, tag.lineno) for arg in args),
            )
        stmts.append(self.emit_output(call("_s", value)))
        return stmts

    def _compile_autoescape(self, tag: Tag) -> list[ast.stmt]:
        """``{% autoescape %}`` only changes how the parser marks outputs."""
        return self._compile_nodes(tag.trimmed_body())

    def _compile_raw(self, tag: Tag) -> list[ast.stmt]:
        """Compile a ``raw`` tag built outside the parser.

        The parser folds raw blocks into a single text node, so this only
        runs for token trees constructed by hand.
        """
        return self._compile_nodes(tag.trimmed_body())
