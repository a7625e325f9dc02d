"""Loop iteration metadata for ``{% for %}`` blocks."""

from __future__ import annotations

from typing import Any


class LoopContext:
    """Loop iteration metadata accessible as `loop` inside `{% for %}` blocks.

    Properties:
        index: 1-based iteration count (1, 2, 3, ...)
        index0: 0-based iteration count (0, 1, 2, ...)
        first: True on the first iteration
        last: True on the final iteration
        length: Total number of items in the sequence
        revindex: Reverse 1-based index (counts down to 1)
        revindex0: Reverse 0-based index (counts down to 0)
        key: List index or mapping key of the current item

    Methods:
        cycle(*values): Return values[index0 % len(values)]

    Example:
            ```
            {% for name in users %}
                <li class="{{ loop.cycle('odd', 'even') }}">{{ loop.index }}. {{ name }}</li>
            {% endfor %}
            ```

    """

    __slots__ = ("_index", "_items", "_length")

    def __init__(self, items: list[tuple[Any, Any]]) -> None:
        self._items = items
        self._length = len(items)
        self._index = 0

    def __iter__(self) -> Any:
        """Iterate through items, updating index for each."""
        for i, (_, item) in enumerate(self._items):
            self._index = i
            yield item

    @property
    def index(self) -> int:
        """1-based iteration count."""
        return self._index + 1

    @property
    def index0(self) -> int:
        """0-based iteration count."""
        return self._index

    @property
    def first(self) -> bool:
        return self._index == 0

    @property
    def last(self) -> bool:
        return self._index == self._length - 1

    @property
    def length(self) -> int:
        return self._length

    @property
    def revindex(self) -> int:
        """Reverse 1-based index (counts down to 1)."""
        return self._length - self._index

    @property
    def revindex0(self) -> int:
        """Reverse 0-based index (counts down to 0)."""
        return self._length - self._index - 1

    @property
    def key(self) -> Any:
        """Index in a list, key in a mapping."""
        return self._items[self._index][0]

    def cycle(self, *values: Any) -> Any:
        """Cycle through the given values.

        Example:
            {{ loop.cycle('odd', 'even') }}
        """
        if not values:
            return None
        return values[self._index % len(values)]

    def __repr__(self) -> str:
        return f"<LoopContext {self.index}/{self.length}>"
