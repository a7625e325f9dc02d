"""Swiglet Template: compiled template object ready for rendering.

The Template class resolves inheritance for a parsed token tree, wraps the
compiled code object and provides the ``render()`` API. Templates are
immutable and thread-safe for concurrent rendering.

Architecture:
    ```
    Template
    ├── _env_ref: WeakRef[Environment]  # Prevents circular refs
    ├── _nodes: token tree              # As parsed
    ├── _resolution: Resolution | None  # Effective tokens and blocks
    ├── _render_func: callable          # Extracted render() function
    └── _variants: {parent: ...}        # Deferred extends, per parent name
    ```

Deferred Templates:
A template whose ``{% extends %}`` names a context variable cannot be
resolved until render time. Its first render with a given parent name
resolves and compiles a variant, which is memoised under a lock.

Memory Safety:
Uses ``weakref.ref(env)`` to break potential cycles:
``Template → (weak) → Environment → cache → Template``

Thread-Safety:
- Templates are immutable after construction (variants are added under a lock)
- ``render()`` creates only local state (buf list)
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

from swiglet.environment.exceptions import (
    TemplateError,
    TemplateRuntimeError,
    build_source_snippet,
)
from swiglet.render_context import render_context
from swiglet.template.helpers import STATIC_NAMESPACE
from swiglet.utils.html import html_escape

if TYPE_CHECKING:
    from collections.abc import Callable

    from swiglet.compiler.inheritance import Resolution, ResolvedBlock
    from swiglet.environment.core import Environment
    from swiglet.nodes import Node, Tag
    from swiglet.render_context import RenderContext

    RenderFunc = Callable[[dict[str, Any], list[str] | None], str]

logger = logging.getLogger(__name__)


class Template:
    """Compiled template ready for rendering.

    Wraps a compiled code object containing a ``render(ctx, _parents)``
    function. Templates are immutable and thread-safe for concurrent
    ``render()`` calls.

    Attributes:
        name: Template identifier (cache key, used in circular-import markers)
        filename: Source file path (for error messages)
        nodes: Token tree as parsed
        blocks: Effective block map after inheritance
        parent: Parent template when ``extends`` names a string literal

    Error Handling:
        Exceptions escaping a render are converted into a
        ``TemplateRuntimeError`` naming the template line. By default the
        error is logged and rendered as an inline ``<pre>`` marker; with
        ``allow_errors=True`` it propagates.

    Example:
            >>> from swiglet import Environment
            >>> env = Environment()
            >>> t = env.from_string("Hello, {{ name|upper }}!")
            >>> t.render(name="World")
            'Hello, WORLD!'

            >>> t({"name": "World"})  # Templates are callable
            'Hello, WORLD!'

    """

    __slots__ = (
        "__weakref__",
        "_env_ref",
        "_filename",
        "_lock",
        "_name",
        "_nodes",
        "_render_func",
        "_resolution",
        "_source",
        "_variants",
    )

    def __init__(
        self,
        env: Environment,
        nodes: list[Node | Tag],
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ):
        """Resolve inheritance and compile.

        Args:
            env: Parent Environment (stored as weak reference)
            nodes: Parsed token tree
            name: Template id (cache key)
            filename: Source filename (for error messages)
            source: Template source for runtime error snippets

        Raises:
            TemplateSyntaxError: On invalid tag arguments or inheritance.
        """
        from swiglet.compiler import resolve_template

        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._nodes = nodes
        self._name = name
        self._filename = filename
        self._source = source
        self._lock = threading.Lock()
        self._variants: dict[str, tuple[Resolution, RenderFunc]] = {}

        self._resolution = resolve_template(nodes, env._load_parent, name=name)
        self._render_func: RenderFunc | None = None
        if self._resolution is not None:
            self._render_func = self._build(self._resolution)
        else:
            logger.debug("Deferring inheritance of %s until render", name or "<string>")

    def _build(self, resolution: Resolution) -> RenderFunc:
        """Compile a resolution and exec it into a fresh namespace."""
        from swiglet.compiler import Compiler

        env = self._env
        code = Compiler(env).compile(
            resolution.nodes,
            resolution.blocks,
            name=self._name,
            filename=self._filename,
        )

        # Capture env reference for closures (will be dereferenced at call time)
        env_ref = self._env_ref

        def _include(
            template_name: Any,
            context: Any,
            parents: list[str],
            ignore_missing: bool = False,
        ) -> str:
            if not isinstance(template_name, str):
                return ""
            if not isinstance(context, dict):
                context = dict(context) if isinstance(context, Mapping) else {}
            _env = env_ref()
            if _env is None:
                raise RuntimeError(
                    f"Environment has been garbage collected while including '{template_name}'"
                )
            if not ignore_missing:
                return _env.compile_file(template_name)._render(context, parents)
            try:
                return _env.compile_file(template_name)._render(context, parents)
            except Exception as e:
                logger.debug("Ignoring failed include of %s: %s", template_name, e)
                return ""

        def _import(
            template_name: Any, prefix: str, context: dict[str, Any], parents: list[str]
        ) -> None:
            if not isinstance(template_name, str):
                return
            _env = env_ref()
            if _env is None:
                raise RuntimeError(
                    f"Environment has been garbage collected while importing '{template_name}'"
                )
            scratch: dict[str, Any] = {}
            _env.compile_file(template_name)._render(scratch, parents)
            for key, value in scratch.items():
                if callable(value):
                    context[f"{prefix}_{key}"] = value

        # Start with shared static namespace (copied once, not constructed)
        namespace: dict[str, Any] = STATIC_NAMESPACE.copy()
        namespace.update(
            {
                "_template_id": self._name or "<template>",
                "_filters": env._filters,
                "_globals": env.globals,
                "_ext": env.extensions,
                "_include": _include,
                "_import": _import,
            }
        )
        exec(code, namespace)
        render: RenderFunc = namespace["render"]
        return render

    @property
    def _env(self) -> Environment:
        """Get the Environment (dereferences weak reference)."""
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected (template: {self._name or 'unknown'})"
            )
        return env

    @property
    def name(self) -> str | None:
        """Template name."""
        return self._name

    @property
    def filename(self) -> str | None:
        """Source filename."""
        return self._filename

    @property
    def nodes(self) -> list[Node | Tag]:
        return self._nodes

    @property
    def deferred(self) -> bool:
        """True if ``extends`` names a context variable."""
        return self._resolution is None

    @property
    def blocks(self) -> dict[str, ResolvedBlock]:
        """Effective blocks; empty for a deferred template."""
        return self._resolution.blocks if self._resolution else {}

    @property
    def parent(self) -> Template | None:
        return self._resolution.parent if self._resolution else None

    def resolution_for(self, context: Mapping[str, Any] | None) -> Resolution | None:
        """Effective tokens and blocks, resolving a deferred template with ``context``.

        Returns None for a deferred template when no context is given.
        """
        if self._resolution is not None:
            return self._resolution
        if context is None:
            return None
        return self._variant(context)[0]

    def _variant(self, context: Mapping[str, Any]) -> tuple[Resolution, RenderFunc]:
        """Resolution and render function of a deferred template for ``context``."""
        from swiglet.compiler.inheritance import extends_target, find_extends, resolve_template

        # Only deferred templates get here: they extend a variable, which a
        # context always resolves to a name or a TemplateResolutionError.
        extends = cast("Tag", find_extends(self._nodes))
        target = cast("str", extends_target(extends, context))

        variant = self._variants.get(target)
        if variant is not None:
            return variant
        with self._lock:
            variant = self._variants.get(target)
            if variant is not None:
                return variant
            logger.debug("Resolving %s against parent %s", self._name or "<string>", target)
            resolution = cast(
                "Resolution",
                resolve_template(self._nodes, self._env._load_parent, context, self._name),
            )
            variant = (resolution, self._build(resolution))
            # A deferred parent depends on more of the context than our target
            if resolution.parent is None or not resolution.parent.deferred:
                self._variants[target] = variant
            return variant

    def render(
        self,
        context: Mapping[str, Any] | None = None,
        parents: list[str] | None = None,
        **kwargs: Any,
    ) -> str:
        """Render template with given context.

        The context is copied, so ``set``, ``macro`` and loop variables
        never leak into the caller's mapping.

        Args:
            context: Mapping of template variables
            parents: Ancestor template ids (for circular include detection)
            **kwargs: Context variables as keyword arguments

        Returns:
            Rendered template as string

        Example:
            >>> t.render(name="World")
            'Hello, World!'
            >>> t.render({"name": "World"})
            'Hello, World!'
        """
        ctx: dict[str, Any] = dict(context) if context else {}
        ctx.update(kwargs)
        return self._render(ctx, list(parents) if parents else None)

    __call__ = render

    def _render(self, ctx: dict[str, Any], parents: list[str] | None) -> str:
        """Render with the error boundary, without copying the context.

        Includes call this directly so the included template shares the
        including template's context dict.
        """
        with render_context(
            template_name=self._name,
            filename=self._filename,
            source=self._source,
        ) as render_ctx:
            try:
                render_func = self._render_func or self._variant(ctx)[1]
                return render_func(ctx, parents)
            except Exception as e:
                return self._handle_error(e, render_ctx)

    def _handle_error(self, error: Exception, render_ctx: RenderContext) -> str:
        """Raise or render an error escaping a render."""
        if not isinstance(error, TemplateError):
            error = self._enhance_error(error, render_ctx)
        if self._env.allow_errors:
            raise error
        logger.warning("Error rendering %s: %s", self._name or "<string>", error)
        return f"<pre>{html_escape(error.format_compact())}</pre>"

    def _enhance_error(self, error: Exception, render_ctx: RenderContext) -> TemplateRuntimeError:
        """Enhance a generic exception with template context from RenderContext.

        Converts generic Python exceptions into TemplateRuntimeError with
        template name, line number, and source snippet context.
        """
        lineno = render_ctx.line or None
        error_str = str(error).strip() or f"{type(error).__name__} (no details available)"

        snippet = None
        if self._source and lineno:
            snippet = build_source_snippet(self._source, lineno)

        enhanced = TemplateRuntimeError(
            error_str,
            template_name=self._filename or self._name,
            lineno=lineno,
            source_snippet=snippet,
        )
        enhanced.__cause__ = error
        return enhanced

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"


class ErrorTemplate:
    """Stand-in for a template that failed to compile (``permissive=True``).

    Rendering emits the compile error as an inline ``<pre>`` marker instead
    of output.
    """

    __slots__ = ("_error", "_name")

    def __init__(self, error: TemplateError, name: str | None = None):
        self._error = error
        self._name = name

    @property
    def error(self) -> TemplateError:
        return self._error

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def nodes(self) -> list[Node | Tag]:
        return []

    @property
    def blocks(self) -> dict[str, ResolvedBlock]:
        return {}

    def render(
        self,
        context: Mapping[str, Any] | None = None,
        parents: list[str] | None = None,
        **kwargs: Any,
    ) -> str:
        return self._render({}, parents)

    __call__ = render

    def _render(self, ctx: dict[str, Any], parents: list[str] | None) -> str:
        return f"<pre>{html_escape(self._error.format_compact())}</pre>"

    def __repr__(self) -> str:
        return f"<ErrorTemplate {self._name or '(inline)'}>"
