"""Base node class for the swiglet token tree."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all tree nodes.

    All nodes track the source line they start on for error reporting.

    """

    lineno: int
