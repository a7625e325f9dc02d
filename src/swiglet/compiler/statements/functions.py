"""Function statement compilation for swiglet compiler.

Provides mixin for compiling ``{% macro %}``.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

from swiglet.analysis.names import is_valid_short_name
from swiglet.compiler.utils import call, const, function_def, join_buffer, load
from swiglet.environment.exceptions import ErrorCode, TemplateSyntaxError

if TYPE_CHECKING:
    from swiglet.nodes import Tag


class FunctionCompilationMixin:
    """Mixin for compiling function statements.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    # ─────────────────────────────────────────────────────────────────────────
    # Host attributes and cross-mixin dependencies (type-check only)
    # ─────────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        # Host attributes (from Compiler.__init__)
        _locals: dict[str, str]

        # From Compiler core
        def _compile_nodes(self, nodes: list[Any]) -> list[ast.stmt]: ...
        def _buffer_prologue(self) -> list[ast.stmt]: ...
        def unique(self, prefix: str) -> str: ...

    def _compile_macro(self, tag: Tag) -> list[ast.stmt]:
        """Compile ``{% macro name(a, b) %}...{% endmacro %}``.

        Parameters may also be written space-separated
        (``{% macro name a b %}``). Generates a nested function whose
        parameters are compile-time locals of its body, and stores it in
        the context:

            def _macro_N(l_a_N=_UNDEFINED, l_b_N=_UNDEFINED, *_extra):
                buf = []
                _append = buf.append
                ... body ...
                return _Markup(''.join(buf))
            ctx['name'] = _macro_N

        Missing arguments are undefined; extra ones are ignored. The output
        is ``Markup``, so printing the call never escapes it a second time.
        """
        words = " ".join(tag.args)
        for ch in "(),":
            words = words.replace(ch, " ")
        names = words.split()
        if not names:
            raise TemplateSyntaxError(
                f'Missing name for "macro" tag on line {tag.lineno}.',
                tag.lineno,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        name, params = names[0], names[1:]
        for word in names:
            if not is_valid_short_name(word):
                raise TemplateSyntaxError(
                    f'Invalid argument "{word}" passed to "macro" tag on line {tag.lineno}.',
                    tag.lineno,
                    code=ErrorCode.INVALID_NAME,
                )

        func_name = self.unique("_macro")
        counter = func_name.rsplit("_", 1)[1]
        param_locals = [f"l_{param}_{counter}" for param in params]

        saved = dict(self._locals)
        self._locals.update(zip(params, param_locals, strict=True))
        try:
            body = [
                *self._buffer_prologue(),
                *self._compile_nodes(tag.trimmed_body()),
                ast.Return(value=call("_Markup", join_buffer("buf"))),
            ]
        finally:
            self._locals = saved

        func = function_def(
            func_name,
            param_locals,
            body,
            defaults=[load("_UNDEFINED") for _ in param_locals],
            vararg="_extra",
        )
        store = ast.Assign(
            targets=[ast.Subscript(value=load("ctx"), slice=const(name), ctx=ast.Store())],
            value=load(func_name),
        )
        return [func, store]
