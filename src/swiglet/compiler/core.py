"""Swiglet compiler core: the main Compiler class.

The Compiler turns a resolved token tree into a Python ``ast.Module`` and
compiles it to a code object. No Python source text is generated at any
point.

Design Principles:
1. **AST-to-AST**: Generate ``ast.Module``, not source strings
2. **StringBuilder**: Output via ``buf.append()``, join at end
3. **Local caching**: ``_escape``, ``_to_str`` and ``buf.append`` bound once
4. **Registry dispatch**: every ``{% tag %}`` compiles through its ``TagSpec``

Generated Code:
    ```python
    def render(ctx, _parents=None):
        if _parents is None:
            _parents = []
        if _template_id in _parents:
            return 'Circular import of template ' + _template_id + ' in ' + _parents[-1]
        _parents = [*_parents, _template_id]
        _e = _escape
        _s = _to_str
        buf = []
        _append = buf.append
        _append('Hello, ')
        _append(_e(_s(_lookup(ctx, 'name', (), _globals.get('name', _UNDEFINED))), 'html'))
        return ''.join(buf)
    ```

Block Inheritance:
Inheritance is resolved before compilation (``swiglet.compiler.inheritance``):
the compiler receives the effective token sequence and block map, and a
``{% block %}`` tag simply compiles the winning block body in place.

"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from swiglet.compiler.expressions import ExpressionCompilationMixin
from swiglet.compiler.names import NameCompilationMixin
from swiglet.compiler.statements import StatementCompilationMixin
from swiglet.compiler.utils import (
    assign,
    call,
    const,
    function_def,
    join_buffer,
    load,
)
from swiglet.nodes import Data, Output, Tag, trim_literals
from swiglet.parser.expressions import parse_value

if TYPE_CHECKING:
    import types
    from collections.abc import Iterable

    from swiglet.compiler.inheritance import ResolvedBlock
    from swiglet.environment.core import Environment
    from swiglet.nodes import Node


class Compiler(
    NameCompilationMixin,
    ExpressionCompilationMixin,
    StatementCompilationMixin,
):
    """Compile a swiglet token tree to a Python code object.

    The generated module defines ``render(ctx, _parents=None)``. It runs in
    a namespace built by ``Template`` from ``STATIC_NAMESPACE`` plus the
    per-template entries ``_template_id``, ``_filters``, ``_globals``,
    ``_ext``, ``_include`` and ``_import``.

    Attributes:
        _env: Parent Environment (filter registry, tag registry)
        _name: Template name for error messages
        _filename: Source file path for compile()
        _locals: Template name -> Python local for compile-time locals
            (``loop``, macro parameters)
        _bound: Names the template assigns (``for``, ``set``, ``macro``,
            ``import``), looked up in the context before the globals
        _blocks: Effective block map of the template being compiled
        _parent_block: Block whose body ``{% parent %}`` emits, if any
        _counter: Counter for unique local names

    Example:
            >>> from swiglet import Environment
            >>> from swiglet.compiler import Compiler
            >>> from swiglet.lexer import tokenize
            >>> from swiglet.parser import Parser
            >>>
            >>> env = Environment()
            >>> nodes = Parser(tokenize("Hello, {{ name }}!"), env.tags).parse()
            >>> code = Compiler(env).compile(nodes, name="greeting.html")
            >>> namespace = {**STATIC_NAMESPACE, "_template_id": "greeting.html", ...}
            >>> exec(code, namespace)
            >>> namespace["render"]({"name": "World"})
            'Hello, World!'

    """

    __slots__ = (
        "_blocks",
        "_bound",
        "_counter",
        "_env",
        "_filename",
        "_locals",
        "_name",
        "_parent_block",
    )

    # Tags that can fail at render time and get a line marker
    _LINE_TRACKED_TAGS = frozenset({"for", "if", "set", "filter", "include", "import"})

    def __init__(self, env: Environment):
        self._env = env
        self._name: str | None = None
        self._filename: str | None = None
        self._locals: dict[str, str] = {}
        self._bound: frozenset[str] = frozenset()
        self._blocks: dict[str, ResolvedBlock] = {}
        self._parent_block: ResolvedBlock | None = None
        self._counter = 0

    def compile(
        self,
        nodes: list[Node | Tag],
        blocks: dict[str, ResolvedBlock] | None = None,
        name: str | None = None,
        filename: str | None = None,
    ) -> types.CodeType:
        """Compile a resolved token sequence to a code object.

        Args:
            nodes: Effective top-level tokens (after inheritance resolution)
            blocks: Effective block map (block name -> ResolvedBlock)
            name: Template name for error messages
            filename: Source filename for error messages

        Raises:
            TemplateSyntaxError: If a tag's arguments are invalid.
        """
        self._name = name
        self._filename = filename
        self._locals = {}
        self._blocks = dict(blocks or {})
        self._bound = bound_names(nodes, self._blocks.values())
        self._parent_block = None
        self._counter = 0

        module = ast.Module(body=[self._make_render_function(nodes)], type_ignores=[])
        ast.fix_missing_locations(module)
        return compile(module, filename or "<template>", "exec")

    def _make_render_function(self, nodes: list[Node | Tag]) -> ast.FunctionDef:
        """Generate ``render(ctx, _parents=None)``.

        The ancestor list is copied before this template is pushed, so
        sibling includes never see each other while nested ones see the
        whole chain.
        """
        circular_message = ast.BinOp(
            left=ast.BinOp(
                left=ast.BinOp(
                    left=const("Circular import of template "),
                    op=ast.Add(),
                    right=load("_template_id"),
                ),
                op=ast.Add(),
                right=const(" in "),
            ),
            op=ast.Add(),
            right=ast.Subscript(value=load("_parents"), slice=const(-1), ctx=ast.Load()),
        )
        body: list[ast.stmt] = [
            # if _parents is None: _parents = []
            ast.If(
                test=ast.Compare(
                    left=load("_parents"), ops=[ast.Is()], comparators=[const(None)]
                ),
                body=[assign("_parents", ast.List(elts=[], ctx=ast.Load()))],
                orelse=[],
            ),
            # if _template_id in _parents: return <marker>
            ast.If(
                test=ast.Compare(
                    left=load("_template_id"), ops=[ast.In()], comparators=[load("_parents")]
                ),
                body=[ast.Return(value=circular_message)],
                orelse=[],
            ),
            # _parents = [*_parents, _template_id]
            assign(
                "_parents",
                ast.List(
                    elts=[ast.Starred(value=load("_parents"), ctx=ast.Load()), load("_template_id")],
                    ctx=ast.Load(),
                ),
            ),
            assign("_e", load("_escape")),
            assign("_s", load("_to_str")),
            *self._buffer_prologue(),
        ]
        body.extend(self.compile_body(nodes))
        body.append(ast.Return(value=join_buffer("buf")))

        return function_def(
            "render",
            ["ctx", "_parents"],
            body,
            defaults=[const(None)],
        )

    @staticmethod
    def _buffer_prologue() -> list[ast.stmt]:
        """``buf = []`` and ``_append = buf.append``"""
        return [
            assign("buf", ast.List(elts=[], ctx=ast.Load())),
            assign("_append", ast.Attribute(value=load("buf"), attr="append", ctx=ast.Load())),
        ]

    # ─────────────────────────────────────────────────────────────────────────
    # Public helpers (used by built-in and custom tag compilers)
    # ─────────────────────────────────────────────────────────────────────────

    def compile_body(
        self, nodes: list[Node | Tag], start: bool = False, end: bool = False
    ) -> list[ast.stmt]:
        """Compile a token sequence, applying whitespace-strip markers first."""
        return self._compile_nodes(trim_literals(nodes, start=start, end=end))

    def compile_value(self, text: str, lineno: int = 0) -> ast.expr:
        """Compile a tag argument (literal or lookup chain with filters)."""
        return self._compile_expr(parse_value(text, lineno))

    def emit_output(self, value_expr: ast.expr) -> ast.stmt:
        """Generate ``_append(value)``.

        All output in compiled templates flows through this method.
        """
        return ast.Expr(value=call("_append", value_expr))

    def ext(self, name: str) -> ast.expr:
        """``_ext[name]``: an object registered through ``extensions=``."""
        return ast.Subscript(value=load("_ext"), slice=const(name), ctx=ast.Load())

    def unique(self, prefix: str) -> str:
        """Unique local name for nested structures (loops, buffers, macros)."""
        self._counter += 1
        return f"{prefix}_{self._counter}"

    # ─────────────────────────────────────────────────────────────────────────
    # Dispatch
    # ─────────────────────────────────────────────────────────────────────────

    def _compile_nodes(self, nodes: list[Node | Tag]) -> list[ast.stmt]:
        stmts: list[ast.stmt] = []
        for node in nodes:
            stmts.extend(self._compile_node(node))
        return stmts

    def _compile_node(self, node: Node | Tag) -> list[ast.stmt]:
        """Compile one token.

        Output tokens and tags that can fail at render time are preceded by
        a line marker so render errors can name the template line.
        """
        if isinstance(node, Data):
            return self._compile_data(node)
        if isinstance(node, Output):
            return [self._make_line_marker(node.lineno), *self._compile_output(node)]
        if isinstance(node, Tag):
            stmts: list[ast.stmt] = []
            if node.name in self._LINE_TRACKED_TAGS:
                stmts.append(self._make_line_marker(node.lineno))
            stmts.extend(self._compile_tag(node))
            return stmts
        return []

    def _compile_tag(self, tag: Tag) -> list[ast.stmt]:
        handler: Any = tag.spec.compile
        if isinstance(handler, str):
            return getattr(self, handler)(tag)
        return list(handler(self, tag))

    def _make_line_marker(self, lineno: int) -> ast.stmt:
        """Generate ``_get_render_ctx().line = lineno``.

        Updates the ContextVar-stored RenderContext instead of the user's
        ctx dict.
        """
        return ast.Assign(
            targets=[
                ast.Attribute(
                    value=call("_get_render_ctx"),
                    attr="line",
                    ctx=ast.Store(),
                )
            ],
            value=const(lineno),
        )


def bound_names(
    nodes: Iterable[Node | Tag], blocks: Iterable[ResolvedBlock] = ()
) -> frozenset[str]:
    """Root names assigned anywhere in a template.

    ``for`` variables, ``set`` targets, macro names and ``import`` aliases.
    Block bodies are scanned along their whole parent chain, so a name
    bound only inside an overridden block still counts.
    """
    names: set[str] = set()
    pending: list[Node | Tag] = list(nodes)
    for block in blocks:
        current: ResolvedBlock | None = block
        while current is not None:
            pending.extend(current.body)
            current = current.parent
    while pending:
        node = pending.pop()
        if not isinstance(node, Tag):
            continue
        pending.extend(node.body)
        args = node.args
        if not args:
            continue
        if node.name == "for":
            names.add(args[0])
        elif node.name == "set":
            names.add(args[0].split(".")[0])
        elif node.name == "macro":
            names.add(args[0].split("(")[0])
        elif node.name == "import" and len(args) == 3:
            names.add(args[2])
    return frozenset(names)
