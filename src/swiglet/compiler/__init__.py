"""Swiglet compiler: token tree to Python code object.

Inheritance is resolved first (``resolve_template``), then ``Compiler``
builds an ``ast.Module`` defining ``render(ctx, _parents=None)``.
"""

from swiglet.compiler.core import Compiler
from swiglet.compiler.inheritance import Resolution, ResolvedBlock, resolve_template

__all__ = [
    "Compiler",
    "Resolution",
    "ResolvedBlock",
    "resolve_template",
]
