"""Template structure statement compilation for swiglet compiler.

Provides mixin for compiling template structure statements
(block, parent, extends, include, import).

Inheritance itself is resolved before compilation; here a ``{% block %}``
only emits the winning body and ``{% parent %}`` the body it overrides.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from swiglet.analysis.names import is_literal, is_valid_name
from swiglet.compiler.inheritance import ResolvedBlock
from swiglet.compiler.utils import call, const, load
from swiglet.environment.exceptions import ErrorCode, TemplateSyntaxError

if TYPE_CHECKING:
    from swiglet.nodes import Tag


class TemplateStructureMixin:
    """Mixin for compiling template structure statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # Host attributes (from Compiler.__init__)
        _blocks: dict[str, ResolvedBlock]
        _parent_block: ResolvedBlock | None

        # From Compiler core
        def _compile_nodes(self, nodes: list[Any]) -> list[ast.stmt]: ...
        def compile_value(self, text: str, lineno: int = 0) -> ast.expr: ...
        def emit_output(self, value_expr: ast.expr) -> ast.stmt: ...

    def _compile_block(self, tag: Tag) -> list[ast.stmt]:
        """Compile ``{% block name %}`` as the effective body of that block."""
        name = tag.args[0] if tag.args else ""
        resolved = self._blocks.get(name)
        if resolved is None:
            resolved = ResolvedBlock(
                name=name, body=tuple(tag.trimmed_body()), parent=None, lineno=tag.lineno
            )
        return self._compile_block_body(resolved)

    def _compile_block_body(self, block: ResolvedBlock) -> list[ast.stmt]:
        saved = self._parent_block
        self._parent_block = block.parent
        try:
            return self._compile_nodes(list(block.body))
        finally:
            self._parent_block = saved

    def _compile_parent(self, tag: Tag) -> list[ast.stmt]:
        """Compile ``{% parent %}``: the overridden body of the enclosing block."""
        if self._parent_block is None:
            return []
        return self._compile_block_body(self._parent_block)

    def _compile_extends(self, tag: Tag) -> list[ast.stmt]:
        """``extends`` is consumed by inheritance resolution."""
        return []

    def _compile_include(self, tag: Tag) -> list[ast.stmt]:
        """Compile ``{% include tpl [ignore missing] [with obj] [only] %}``.

        Generates ``_append(_include(<name>, <context>, _parents, <ignore>))``.
        The included template sees the current context itself, a named object
        (``with``) or an empty context (``only``).
        """
        args = list(tag.args)
        template = args.pop(0) if args else ""
        if not is_literal(template) and not is_valid_name(template):
            raise self._include_error(tag)

        context: ast.expr = load("ctx")
        ignore = False
        if args:
            if args[-1] == "only":
                context = ast.Dict(keys=[], values=[])
                args.pop()
            if args[:2] == ["ignore", "missing"]:
                ignore = True
                del args[:2]
            if args and args[0] != "with":
                raise self._include_error(tag)
            if args:
                args.pop(0)
                if not args:
                    raise TemplateSyntaxError(
                        'Context for "include" tag not provided, but expected after '
                        f'"with" token on line {tag.lineno}.',
                        tag.lineno,
                        code=ErrorCode.INVALID_ARGUMENTS,
                    )
                context = self.compile_value(args.pop(0), tag.lineno)
            if args:
                raise self._include_error(tag)

        return [
            self.emit_output(
                call(
                    "_include",
                    self.compile_value(template, tag.lineno),
                    context,
                    load("_parents"),
                    const(ignore),
                )
            )
        ]

    @staticmethod
    def _include_error(tag: Tag) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            f'Invalid arguments passed to "include" tag on line {tag.lineno}.',
            tag.lineno,
            code=ErrorCode.INVALID_ARGUMENTS,
        )

    def _compile_import(self, tag: Tag) -> list[ast.stmt]:
        """Compile ``{% import "file" as name %}``.

        Generates ``_import(<file>, 'name', ctx, _parents)``, which renders
        the file into a scratch context and copies every callable it
        defined into ``ctx`` as ``name_<key>``.
        """
        args = tag.args
        file = args[0] if args else ""
        if not is_literal(file) and not is_valid_name(file):
            raise TemplateSyntaxError(
                f'Invalid attempt to import "{file}" on line {tag.lineno}.',
                tag.lineno,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        if len(args) != 3 or args[1] != "as" or not is_valid_name(args[2]):
            raise TemplateSyntaxError(
                f"Invalid syntax {{% import {' '.join(args)} %}} on line {tag.lineno}.",
                tag.lineno,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        return [
            ast.Expr(
                value=call(
                    "_import",
                    self.compile_value(file, tag.lineno),
                    const(args[2]),
                    load("ctx"),
                    load("_parents"),
                )
            )
        ]
