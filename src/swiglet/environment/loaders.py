"""Template loaders for swiglet environments.

Loaders provide template source to the Environment. They implement
`get_source(name)` returning `(source, filename)`; the name is used as the
template's cache key, the filename only in error messages.

Built-in Loaders:
- `FileSystemLoader`: Load from a root directory; absolute paths bypass it
- `DictLoader`: Load from an in-memory dictionary (testing/embedded)
- `FunctionLoader`: Wrap a callable as a loader
- `ChoiceLoader`: Try several loaders in order

Custom Loaders:
Anything with a matching `get_source` works:
    ```python
    class DatabaseLoader:
        def get_source(self, name: str) -> tuple[str, str | None]:
            row = db.query("SELECT source FROM templates WHERE name = ?", name)
            if not row:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return row.source, f"db://{name}"
    ```

Thread-Safety:
Loaders should be thread-safe for concurrent `get_source()` calls. The
built-in loaders keep no mutable state.

"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Protocol

from swiglet.environment.exceptions import TemplateNotFoundError

_ABSOLUTE_RE = re.compile(r"^([A-Za-z]:[\\/]|[\\/])")


class Loader(Protocol):
    def get_source(self, name: str) -> tuple[str, str | None]: ...


def is_absolute(path: str) -> bool:
    """True for ``/x`` and drive-letter paths such as ``C:\\x``."""
    return bool(_ABSOLUTE_RE.match(path))


class FileSystemLoader:
    """Load templates from a root directory.

    Relative names are resolved against ``root``; absolute names (a leading
    ``/`` or a drive letter) are read as given.

    Example:
            >>> loader = FileSystemLoader("templates/")
            >>> source, filename = loader.get_source("pages/about.html")
            >>> filename
            'templates/pages/about.html'
            >>> loader.get_source("/srv/shared/footer.html")[1]
            '/srv/shared/footer.html'

    Raises:
        TemplateNotFoundError: If the file does not exist

    """

    __slots__ = ("_encoding", "_root")

    def __init__(self, root: str | Path = "/", encoding: str = "utf-8"):
        self._root = Path(root)
        self._encoding = encoding

    @property
    def root(self) -> Path:
        return self._root

    def get_source(self, name: str) -> tuple[str, str]:
        """Load template source from the filesystem."""
        path = Path(name) if is_absolute(name) else self._root / name
        if not path.is_file():
            raise TemplateNotFoundError(f"Template '{name}' not found in: {self._root}")
        return path.read_text(self._encoding), str(path)


class DictLoader:
    """Load templates from an in-memory dictionary.

    Maps template names to source strings. Useful for testing and for
    templates built at runtime.

    Example:
            >>> loader = DictLoader({
            ...     "base.html": "<h1>{% block title %}{% endblock %}</h1>",
            ...     "page.html": '{% extends "base.html" %}{% block title %}Hi{% endblock %}',
            ... })
            >>> Environment(loader=loader).compile_file("page.html").render()
            '<h1>Hi</h1>'

    Raises:
        TemplateNotFoundError: If template name not in mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str]):
        self._mapping = mapping

    def get_source(self, name: str) -> tuple[str, None]:
        if name not in self._mapping:
            from difflib import get_close_matches

            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
            raise TemplateNotFoundError(msg)
        return self._mapping[name], None


class FunctionLoader:
    """Wrap a callable as a template loader.

    The function takes a template name and returns the source, a
    ``(source, filename)`` tuple, or ``None`` when there is no such
    template.

    Example:
            >>> def load(name):
            ...     if name == "greeting.html":
            ...         return "Hello, {{ name }}!"
            ...     return None
            >>> env = Environment(loader=FunctionLoader(load))
            >>> env.compile_file("greeting.html").render({"name": "World"})
            'Hello, World!'

    Raises:
        TemplateNotFoundError: If ``load_func`` returns ``None``

    """

    __slots__ = ("_load_func",)

    def __init__(self, load_func: Callable[[str], str | tuple[str, str | None] | None]):
        self._load_func = load_func

    def get_source(self, name: str) -> tuple[str, str | None]:
        result = self._load_func(name)
        if result is None:
            raise TemplateNotFoundError(f"Template '{name}' not found")
        if isinstance(result, str):
            return result, None
        return result


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match.

    Example:
            >>> loader = ChoiceLoader([
            ...     DictLoader({"nav.html": "<nav>Custom</nav>"}),
            ...     FileSystemLoader("themes/default/"),
            ... ])

    Raises:
        TemplateNotFoundError: If no loader can find the template

    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: Sequence[Loader]):
        self._loaders = list(loaders)

    def get_source(self, name: str) -> tuple[str, str | None]:
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )
