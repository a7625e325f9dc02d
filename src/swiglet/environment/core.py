"""Swiglet Environment: configuration, template cache and compile entry points.

The Environment owns everything templates share: the filter and tag
registries, globals, extensions, the loader and the template cache.

Pipeline:
    ```
    source ─▶ Lexer ─▶ Parser ─▶ Template (resolve inheritance ─▶ Compiler ─▶ exec)
    ```

Cache:
Templates are cached by filename, or by the source itself when no filename
is given. Lookups and inserts happen under one re-entrant lock, so parents,
includes and deferred extends can compile recursively in the same thread
while other threads wait; the first writer wins and a key never maps to two
templates.

"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from swiglet.environment.exceptions import TemplateSyntaxError
from swiglet.environment.filters import DEFAULT_FILTERS, make_date_filter
from swiglet.environment.loaders import FileSystemLoader, Loader
from swiglet.environment.registry import Registry
from swiglet.environment.tags import DEFAULT_TAGS, TagSpec
from swiglet.lexer import Lexer
from swiglet.parser import Parser
from swiglet.template import ErrorTemplate, Template

logger = logging.getLogger(__name__)


class Environment:
    """Central configuration and template cache.

    Args:
        autoescape: Escape ``{{ }}`` output: True/"html", "js", or False
        cache: Cache compiled templates by default
        filters: Extra filters (merged over the built-ins)
        tags: Extra tags, as ``TagSpec`` or compile callables
        root: Base directory for relative paths of the default loader
        tz_offset: Default ``date`` filter offset in minutes, positive west of UTC
        extensions: Objects exposed to custom tags as ``_ext[name]``
        globals: Values visible to every template through the ambient scope
        loader: Template source loader (default ``FileSystemLoader(root)``)
        encoding: Source encoding of the default loader
        allow_errors: Let render errors propagate instead of rendering markers
        permissive: Return an ``ErrorTemplate`` instead of raising on compile errors

    Example:
            >>> env = Environment(filters={"shout": lambda s: s.upper() + "!"})
            >>> env.compile("{{ word|shout }}").render(word="hi")
            'HI!'

            >>> env = Environment(loader=DictLoader({"hi.html": "Hi {{ name }}"}))
            >>> env.compile_file("hi.html").render(name="Ada")
            'Hi Ada'

    """

    def __init__(
        self,
        autoescape: bool | str = True,
        cache: bool = True,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        tags: Mapping[str, TagSpec | Callable[..., Any]] | None = None,
        root: str = "/",
        tz_offset: float = 0,
        extensions: Mapping[str, Any] | None = None,
        globals: Mapping[str, Any] | None = None,
        loader: Loader | None = None,
        encoding: str = "utf-8",
        allow_errors: bool = False,
        permissive: bool = False,
    ):
        self.autoescape = autoescape
        self.cache = cache
        self.root = root
        self.tz_offset = tz_offset
        self.encoding = encoding
        self.allow_errors = allow_errors
        self.permissive = permissive
        self.extensions: dict[str, Any] = dict(extensions or {})
        self.globals: dict[str, Any] = dict(globals or {})
        self.loader: Loader = loader or FileSystemLoader(root, encoding=encoding)

        self._filters: dict[str, Callable[..., Any]] = {
            **DEFAULT_FILTERS,
            "date": make_date_filter(tz_offset),
            **(filters or {}),
        }
        self._tags: dict[str, TagSpec] = {
            **DEFAULT_TAGS,
            **{name: _as_tag_spec(name, tag) for name, tag in (tags or {}).items()},
        }
        self._cache: dict[str, Template | ErrorTemplate] = {}
        self._lock = threading.RLock()

    @property
    def filters(self) -> Registry:
        """Filter registry (copy-on-write, dict-like)."""
        return Registry(self, "_filters")

    @property
    def tags(self) -> Registry:
        """Tag registry (copy-on-write, dict-like)."""
        return Registry(self, "_tags")

    # ─────────────────────────────────────────────────────────────────────────
    # Compile entry points
    # ─────────────────────────────────────────────────────────────────────────

    def compile(
        self, source: str, filename: str | None = None, cache: bool | None = None
    ) -> Template | ErrorTemplate:
        """Compile template source.

        Args:
            source: Template source
            filename: Template id and cache key (default: the source itself)
            cache: Use the template cache (default: the environment setting)

        Raises:
            TemplateSyntaxError: On invalid syntax, unless ``permissive``.
        """
        key = filename or source
        if not self._use_cache(cache):
            return self._compile(source, filename, filename, self.permissive)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Template cache hit: %s", filename or "<string>")
                return cached
            logger.debug("Template cache miss: %s", filename or "<string>")
            template = self._compile(source, filename, filename, self.permissive)
            self._cache[key] = template
            return template

    def compile_file(self, path: str, cache: bool | None = None) -> Template | ErrorTemplate:
        """Load and compile a template through the loader.

        Relative paths are resolved by the loader (against ``root`` for the
        default one); the cache key is the path as given.

        Raises:
            TemplateNotFoundError: If the loader cannot find the template.
            TemplateSyntaxError: On invalid syntax, unless ``permissive``.
        """
        return self._get_file(path, cache, self.permissive)

    from_string = compile
    get_template = compile_file

    def clear_cache(self) -> None:
        """Drop every cached template."""
        with self._lock:
            self._cache.clear()

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _use_cache(self, cache: bool | None) -> bool:
        return self.cache if cache is None else cache

    def _get_file(self, path: str, cache: bool | None, permissive: bool) -> Template | ErrorTemplate:
        if not self._use_cache(cache):
            source, filename = self.loader.get_source(path)
            return self._compile(source, path, filename or path, permissive)
        with self._lock:
            cached = self._cache.get(path)
            if cached is not None:
                logger.debug("Template cache hit: %s", path)
                return cached
            logger.debug("Template cache miss: %s", path)
            source, filename = self.loader.get_source(path)
            template = self._compile(source, path, filename or path, permissive)
            self._cache[path] = template
            return template

    def _load_parent(self, path: str) -> Template:
        """Compile an ``extends`` target; compile errors always propagate."""
        template = self._get_file(path, None, permissive=False)
        if isinstance(template, ErrorTemplate):
            raise template.error
        return template

    def _compile(
        self,
        source: str,
        name: str | None,
        filename: str | None,
        permissive: bool,
    ) -> Template | ErrorTemplate:
        logger.debug("Compiling template %s", name or "<string>")
        try:
            tokens = Lexer(source, name, filename).tokenize()
            nodes = Parser(
                tokens,
                self._tags,
                self.autoescape,
                name=name,
                filename=filename,
                source=source,
            ).parse()
            return Template(self, nodes, name=name, filename=filename, source=source)
        except TemplateSyntaxError as e:
            error = e.with_template(name, filename, source)
            if not permissive:
                raise error from None
            logger.warning("Compile error in %s: %s", name or "<string>", error.message)
            return ErrorTemplate(error, name)

    def __repr__(self) -> str:
        return f"<Environment loader={self.loader!r} cached={len(self._cache)}>"


def _as_tag_spec(name: str, tag: TagSpec | Callable[..., Any]) -> TagSpec:
    """Accept a bare compile callable, reading ``ends`` from an attribute."""
    if isinstance(tag, TagSpec):
        return tag
    return TagSpec(name, tag, ends=bool(getattr(tag, "ends", False)))
