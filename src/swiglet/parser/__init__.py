"""Parser for swiglet templates.

Builds the token tree from lexer output. Expressions inside ``{{ }}`` and
tag arguments are parsed by ``swiglet.parser.expressions``.
"""

from swiglet.parser.core import Parser
from swiglet.parser.expressions import parse_condition, parse_value, parse_variable

__all__ = ["Parser", "parse_condition", "parse_value", "parse_variable"]
