"""Process-wide default environment.

Module-level ``init()``, ``compile()``, ``compile_file()`` and
``render_file()`` work on one shared ``Environment``. ``init()`` replaces
it, so re-initialising drops every cached template and all previous
configuration at once. Code that needs isolation should create its own
``Environment`` instead.

Example:
    ```python
    import swiglet

    swiglet.init(root="templates/", filters={"shout": str.upper})
    swiglet.render_file("index.html", {"title": "Home"})
    ```

"""

from __future__ import annotations

import inspect
import logging
import threading
import warnings
from collections.abc import Mapping
from typing import Any

from swiglet.environment.core import Environment
from swiglet.template import ErrorTemplate, Template

logger = logging.getLogger(__name__)

# camelCase option names accepted for compatibility
_OPTION_ALIASES = {
    "tzOffset": "tz_offset",
    "allowErrors": "allow_errors",
}
_OPTIONS = frozenset(inspect.signature(Environment).parameters)

_lock = threading.Lock()
_default = Environment()


def init(**options: Any) -> Environment:
    """Replace the default environment.

    Accepts the ``Environment`` keyword arguments; unknown options are
    ignored with a warning. User filters and tags are merged over the
    built-ins.

    Returns:
        The new default environment.
    """
    global _default

    config: dict[str, Any] = {}
    for key, value in options.items():
        if key in _OPTION_ALIASES:
            warnings.warn(
                f"Option '{key}' is deprecated; use '{_OPTION_ALIASES[key]}' instead.",
                DeprecationWarning,
                stacklevel=2,
            )
            key = _OPTION_ALIASES[key]
        if key not in _OPTIONS:
            warnings.warn(f"Ignoring unknown option '{key}'.", UserWarning, stacklevel=2)
            continue
        config[key] = value

    env = Environment(**config)
    with _lock:
        _default.clear_cache()
        _default = env
    logger.debug("Default environment replaced (%s)", ", ".join(sorted(config)) or "defaults")
    return env


def get_environment() -> Environment:
    """The current default environment."""
    return _default


def compile(
    source: str, filename: str | None = None, cache: bool | None = None
) -> Template | ErrorTemplate:
    """Compile source with the default environment."""
    return _default.compile(source, filename=filename, cache=cache)


def compile_file(path: str, cache: bool | None = None) -> Template | ErrorTemplate:
    """Compile a file with the default environment."""
    return _default.compile_file(path, cache=cache)


def render_file(path: str, context: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
    """Compile (or fetch from cache) and render a file in one call."""
    return _default.compile_file(path).render(context, **kwargs)
