"""RenderContext: per-render state isolated from the user context.

Generated code records the template line it is executing on the current
RenderContext (``_get_render_ctx().line = N``), so an exception escaping a
render can be reported with the template location instead of a Python
frame in generated code.

Thread Safety:
    ContextVars are thread-local. Each thread has its own
    RenderContext, and nested renders (includes, imports) restore the
    outer one when they finish.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass


@dataclass
class RenderContext:
    """Per-render state.

    Attributes:
        template_name: Current template name for error messages
        filename: Source file path for error messages
        source: Template source for runtime error snippets
        line: Current line number (updated during render by generated code)
    """

    template_name: str | None = None
    filename: str | None = None
    source: str | None = None
    line: int = 0


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


@contextmanager
def render_context(
    template_name: str | None = None,
    filename: str | None = None,
    source: str | None = None,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext and sets it as the current context for
    the duration of the with block, restoring the previous one on exit.

    Example:
        with render_context(template_name="page.html") as ctx:
            html = template._render_func(data)
            # ctx.line updated during render for error tracking
    """
    ctx = RenderContext(template_name=template_name, filename=filename, source=source)
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
