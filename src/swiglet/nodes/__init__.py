"""Token tree nodes produced by the parser.

Literal text is ``Data``, ``{{ }}`` is ``Output``, ``{% %}`` is ``Tag``
(owning its body for tags that take an end tag). Expression nodes describe
values inside variables and tag arguments.
"""

from swiglet.nodes.base import Node
from swiglet.nodes.expressions import (
    BoolOp,
    Compare,
    Const,
    DictLiteral,
    Expr,
    Filter,
    Filtered,
    ListLiteral,
    Name,
    Not,
    Variable,
)
from swiglet.nodes.output import Data, Output
from swiglet.nodes.tags import StripFlags, Tag, trim_literals

__all__ = [
    "BoolOp",
    "Compare",
    "Const",
    "Data",
    "DictLiteral",
    "Expr",
    "Filter",
    "Filtered",
    "ListLiteral",
    "Name",
    "Node",
    "Not",
    "Output",
    "StripFlags",
    "Tag",
    "Variable",
    "trim_literals",
]
