"""Output nodes: literal text and variable interpolation."""

from __future__ import annotations

from dataclasses import dataclass

from swiglet.nodes.base import Node
from swiglet.nodes.expressions import Variable


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Literal text between template constructs (raw blocks included)."""

    value: str


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Output expression: ``{{ expr }}``

    ``escape`` is the escape type applied last (``"html"``, ``"js"``) or
    None when the value is emitted as-is. ``explicit`` marks an escape
    requested with the ``escape``/``e`` filter, which also escapes ``Markup``.
    """

    value: Variable
    escape: str | None = "html"
    explicit: bool = False
