"""Lookup-chain compilation.

A chain such as ``user.address[key]`` compiles to a two-tier lookup:

    ```python
    _lookup(ctx, 'user', ('address', <key lookup>), <ambient>)
    ```

The ambient tier is a compile-time local (``loop``, a macro parameter)
when the root names one, otherwise the environment global of that name.
A name the template assigns itself (``for``, ``set``, ``macro``,
``import``) only reaches the global while the context has no value for it.
Dynamic segments are nested lookups of their own; an undefined segment
makes the whole chain undefined.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from swiglet.analysis.names import sanitize_name
from swiglet.compiler.utils import call, const, load, method
from swiglet.nodes import Const, Name

if TYPE_CHECKING:
    from swiglet.nodes import Expr


class NameCompilationMixin:
    """Mixin for compiling lookup chains and calls through them."""

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _bound: frozenset[str]
        _locals: dict[str, str]

        def _compile_expr(self, node: Any) -> ast.expr: ...

    def _ambient(self, root: str) -> ast.expr:
        """First lookup tier for ``root``."""
        local = self._locals.get(root)
        if local is not None:
            return load(local)
        # _globals.get('root', _UNDEFINED)
        global_value = method("_globals", "get", const(root), load("_UNDEFINED"))
        if root not in self._bound:
            return global_value
        # _UNDEFINED if 'root' in ctx else _globals.get('root', _UNDEFINED)
        return ast.IfExp(
            test=ast.Compare(left=const(root), ops=[ast.In()], comparators=[load("ctx")]),
            body=load("_UNDEFINED"),
            orelse=global_value,
        )

    def _compile_path(self, path: tuple[Expr, ...]) -> ast.Tuple:
        return ast.Tuple(
            elts=[
                const(seg.value) if isinstance(seg, Const) else self._compile_expr(seg)
                for seg in path
            ],
            ctx=ast.Load(),
        )

    def _compile_name(self, node: Name) -> ast.expr:
        """``_lookup(ctx, root, path, ambient)``"""
        return call(
            "_lookup",
            load("ctx"),
            const(node.root),
            self._compile_path(node.path),
            self._ambient(node.root),
        )

    def _compile_call(self, node: Name, args: tuple[Expr, ...]) -> ast.expr:
        """Call through a chain: ``{{ forms.input("email") }}``.

        ``_output_value`` tries the context (flattened name first, then the
        chain), then the ambient tier, and calls the first callable it
        finds.
        """
        return call(
            "_output_value",
            load("ctx"),
            const(sanitize_name(node.source)),
            const(node.root),
            self._compile_path(node.path),
            self._ambient(node.root),
            ast.Tuple(elts=[self._compile_expr(arg) for arg in args], ctx=ast.Load()),
        )
