"""Control flow statement compilation for swiglet compiler.

Provides mixin for compiling control flow statements (if, else, for).

``{% else %}`` is not a block of its own: ``if`` and ``for`` split their
body on the ``else`` tags that sit directly inside them.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from swiglet.analysis.names import is_valid_short_name
from swiglet.compiler.utils import assign, call, const, load, method
from swiglet.environment.exceptions import ErrorCode, TemplateSyntaxError
from swiglet.nodes import Filtered, Name, Tag, trim_literals
from swiglet.parser.expressions import parse_condition, parse_value

if TYPE_CHECKING:
    from swiglet.nodes import Node


class ControlFlowMixin:
    """Mixin for compiling control flow statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # Host attributes (from Compiler.__init__)
        _locals: dict[str, str]

        # From ExpressionCompilationMixin
        def _compile_expr(self, node: Any) -> ast.expr: ...

        # From Compiler core
        def _compile_nodes(self, nodes: list[Any]) -> list[ast.stmt]: ...
        def unique(self, prefix: str) -> str: ...

    def _split_else(self, tag: Tag) -> list[tuple[Tag | None, list[Node | Tag]]]:
        """Split a tag body on its direct ``else`` tags.

        Returns ``(else_tag, segment)`` pairs; the first pair has no else
        tag. Strip markers are applied before splitting so the else tags'
        own markers trim their neighbours.
        """
        segments: list[tuple[Tag | None, list[Node | Tag]]] = [(None, [])]
        for node in trim_literals(tag.body, start=tag.strip.start, end=tag.strip.end):
            if isinstance(node, Tag) and node.name == "else":
                segments.append((node, []))
            else:
                segments[-1][1].append(node)
        return segments

    def _compile_if(self, tag: Tag) -> list[ast.stmt]:
        """Compile ``{% if %}`` with ``{% else if %}`` / ``{% else %}`` branches.

        Generates a plain Python ``if``/``elif``/``else`` chain, so
        ``and``/``or`` short-circuit and only one branch runs.
        """
        branches: list[tuple[ast.expr | None, list[ast.stmt]]] = []
        for else_tag, segment in self._split_else(tag):
            if else_tag is None:
                test: ast.expr | None = self._compile_condition(tag.args, tag.lineno)
            elif not else_tag.args:
                test = None
            elif else_tag.args[0] == "if":
                test = self._compile_condition(else_tag.args[1:], else_tag.lineno)
            else:
                raise TemplateSyntaxError(
                    f'Invalid arguments sent to "else" tag on line {else_tag.lineno}. '
                    'Use "else if" for conditions.',
                    else_tag.lineno,
                    code=ErrorCode.INVALID_ARGUMENTS,
                )
            branches.append((test, self._compile_nodes(segment) or [ast.Pass()]))

        orelse: list[ast.stmt] = []
        for test, body in reversed(branches):
            if test is None:
                orelse = body
            else:
                orelse = [ast.If(test=test, body=body, orelse=orelse)]
        return orelse

    def _compile_condition(self, words: list[str], lineno: int) -> ast.expr:
        return self._compile_expr(parse_condition(words, lineno))

    def _compile_else(self, tag: Tag) -> list[ast.stmt]:
        """Reached only for ``else`` tags that ``if``/``for`` did not consume."""
        if not tag.parents or tag.parents[-1] not in ("if", "for"):
            raise TemplateSyntaxError(
                f'Cannot call else tag outside of "if" or "for" context on line {tag.lineno}.',
                tag.lineno,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        raise TemplateSyntaxError(
            f'Unexpected "else" tag on line {tag.lineno}.',
            tag.lineno,
            code=ErrorCode.INVALID_ARGUMENTS,
        )

    def _compile_for(self, tag: Tag) -> list[ast.stmt]:
        """Compile ``{% for item in items %}...{% else %}...{% endfor %}``.

        Generates:
            _iter_N = _loop_items(<items>)
            l_loop_N = _LoopContext(_iter_N)
            _saved_N = ctx.get('item', _UNDEFINED)
            for _item_N in l_loop_N:
                ctx['item'] = _item_N
                ... body ...
            if not _iter_N:
                ... else body ...
            if _saved_N is _UNDEFINED:
                ctx.pop('item', None)
            else:
                ctx['item'] = _saved_N

        ``loop`` is a compile-time local inside the body, so nested loops
        each see their own.
        """
        args = tag.args
        if len(args) < 3 or args[1] != "in":
            raise TemplateSyntaxError(
                f'Invalid syntax in "for" tag on line {tag.lineno}.',
                tag.lineno,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        var = args[0]
        if not is_valid_short_name(var):
            raise TemplateSyntaxError(
                f'Invalid arguments ({var}) passed to "for" tag on line {tag.lineno}.',
                tag.lineno,
                code=ErrorCode.INVALID_NAME,
            )
        source = " ".join(args[2:])
        iterable = parse_value(source, tag.lineno)
        root = iterable.value if isinstance(iterable, Filtered) else iterable
        if not isinstance(root, Name):
            raise TemplateSyntaxError(
                f'Invalid arguments ({source}) passed to "for" tag on line {tag.lineno}.',
                tag.lineno,
                code=ErrorCode.INVALID_NAME,
            )

        iter_name = self.unique("_iter")
        loop_name = self.unique("l_loop")
        saved_name = self.unique("_saved")
        item_name = self.unique("_item")

        segments = self._split_else(tag)
        if len(segments) > 2:
            extra = segments[2][0]
            lineno = extra.lineno if extra is not None else tag.lineno
            raise TemplateSyntaxError(
                f'Unexpected "else" tag on line {lineno}.',
                lineno,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        else_tag = segments[1][0] if len(segments) > 1 else None
        if else_tag is not None and else_tag.args:
            raise TemplateSyntaxError(
                f'"else" tag cannot accept arguments in the "for" context on line {else_tag.lineno}.',
                else_tag.lineno,
                code=ErrorCode.INVALID_ARGUMENTS,
            )

        stmts: list[ast.stmt] = [
            assign(iter_name, call("_loop_items", self._compile_expr(iterable))),
            assign(loop_name, call("_LoopContext", load(iter_name))),
            assign(saved_name, method("ctx", "get", const(var), load("_UNDEFINED"))),
        ]

        # The loop variable lives in ctx, so it must not resolve to a macro parameter
        saved_locals = dict(self._locals)
        self._locals.pop(var, None)
        self._locals["loop"] = loop_name
        try:
            body = self._compile_nodes(segments[0][1])
        finally:
            self._locals = saved_locals

        stmts.append(
            ast.For(
                target=ast.Name(id=item_name, ctx=ast.Store()),
                iter=load(loop_name),
                body=[
                    ast.Assign(
                        targets=[
                            ast.Subscript(value=load("ctx"), slice=const(var), ctx=ast.Store())
                        ],
                        value=load(item_name),
                    ),
                    *body,
                ],
                orelse=[],
            )
        )

        if else_tag is not None:
            else_body = self._compile_nodes(segments[1][1])
            if else_body:
                stmts.append(
                    ast.If(
                        test=ast.UnaryOp(op=ast.Not(), operand=load(iter_name)),
                        body=else_body,
                        orelse=[],
                    )
                )

        # Restore the previous binding of the loop variable
        stmts.append(
            ast.If(
                test=ast.Compare(
                    left=load(saved_name), ops=[ast.Is()], comparators=[load("_UNDEFINED")]
                ),
                body=[ast.Expr(value=method("ctx", "pop", const(var), const(None)))],
                orelse=[
                    ast.Assign(
                        targets=[
                            ast.Subscript(value=load("ctx"), slice=const(var), ctx=ast.Store())
                        ],
                        value=load(saved_name),
                    )
                ],
            )
        )
        return stmts
