"""Logic tag nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from swiglet.environment.tags import TagSpec
    from swiglet.nodes.base import Node


@dataclass(slots=True)
class StripFlags:
    """Whitespace-strip markers of a logic tag.

    ``before``/``after`` come from ``{%-`` / ``-%}`` on the opening tag and
    trim the neighbouring literals. ``start``/``end`` trim the first/last
    literal of the tag's own body; ``end`` and the final ``after`` are set
    when the closing tag is read.
    """

    before: bool = False
    after: bool = False
    start: bool = False
    end: bool = False


@dataclass(slots=True)
class Tag:
    """A parsed ``{% name args %}`` tag.

    Mutable while the parser is filling in its body and strip flags, so it
    is not a frozen ``Node``; never mutated after ``Parser.parse()`` returns.
    """

    lineno: int
    name: str
    args: list[str]
    spec: TagSpec
    parents: tuple[str, ...] = ()
    body: list[Node] = field(default_factory=list)
    strip: StripFlags = field(default_factory=StripFlags)

    def __repr__(self) -> str:
        return f"<Tag {self.name} {' '.join(self.args)!r} line {self.lineno}>"

    def trimmed_body(self) -> list[Node | Tag]:
        """Body with the ``start``/``end`` strip markers applied."""
        return trim_literals(self.body, start=self.strip.start, end=self.strip.end)


def trim_literals(
    nodes: list[Node | Tag], start: bool = False, end: bool = False
) -> list[Node | Tag]:
    """Apply strip markers to the literal text in ``nodes``.

    A ``Data`` after a tag with ``strip.after`` loses its leading
    whitespace, one before a tag with ``strip.before`` its trailing
    whitespace. ``start``/``end`` trim the first/last node when it is text.
    Returns a new list; the nodes themselves are never modified.
    """
    from swiglet.nodes.output import Data

    out: list[Node | Tag] = []
    last = len(nodes) - 1
    for i, node in enumerate(nodes):
        if not isinstance(node, Data):
            out.append(node)
            continue
        text = node.value
        prev = nodes[i - 1] if i else None
        nxt = nodes[i + 1] if i < last else None
        if (i == 0 and start) or (isinstance(prev, Tag) and prev.strip.after):
            text = text.lstrip()
        if (i == last and end) or (isinstance(nxt, Tag) and nxt.strip.before):
            text = text.rstrip()
        if text != node.value:
            node = Data(lineno=node.lineno, value=text)
        out.append(node)
    return out
