"""Filter and tag registries for swiglet environments.

Dict-like views over the environment's filter and tag tables.
"""

from __future__ import annotations

from collections.abc import ItemsView, KeysView, ValuesView
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from swiglet.environment.core import Environment


class Registry:
    """Dict-like interface over one of an environment's tables.

    Supports:
        - env.filters['name'] = func
        - env.tags.update({'name': TagSpec(...)})
        - func = env.filters['name']
        - 'name' in env.filters

    All mutations use copy-on-write: templates being compiled in another
    thread keep reading the table they started with. Templates already
    compiled are not affected by later registrations.
    """

    __slots__ = ("_attr", "_env")

    def __init__(self, env: Environment, attr: str):
        self._env = env
        self._attr = attr

    def _get_dict(self) -> dict[str, Any]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, Any]) -> None:
        setattr(self._env, self._attr, d)

    def __getitem__(self, name: str) -> Any:
        return self._get_dict()[name]

    def __setitem__(self, name: str, value: Any) -> None:
        new = self._get_dict().copy()
        new[name] = value
        self._set_dict(new)

    def __delitem__(self, name: str) -> None:
        new = self._get_dict().copy()
        del new[name]
        self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __iter__(self):
        return iter(self._get_dict())

    def __len__(self) -> int:
        return len(self._get_dict())

    def get(self, name: str, default: Any = None) -> Any:
        return self._get_dict().get(name, default)

    def update(self, mapping: dict[str, Any]) -> None:
        """Batch update."""
        new = self._get_dict().copy()
        new.update(mapping)
        self._set_dict(new)

    def copy(self) -> dict[str, Any]:
        """Return a copy of the underlying dict."""
        return self._get_dict().copy()

    def keys(self) -> KeysView[str]:
        return self._get_dict().keys()

    def values(self) -> ValuesView[Any]:
        return self._get_dict().values()

    def items(self) -> ItemsView[str, Any]:
        return self._get_dict().items()
