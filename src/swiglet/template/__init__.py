"""Swiglet Template package: compiled template objects ready for rendering."""

from swiglet.template.core import ErrorTemplate, Template
from swiglet.template.helpers import UNDEFINED
from swiglet.template.loop_context import LoopContext
from swiglet.utils.html import Markup

__all__ = [
    "UNDEFINED",
    "ErrorTemplate",
    "LoopContext",
    "Markup",
    "Template",
]
