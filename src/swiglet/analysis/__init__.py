"""Static analysis of names used in templates."""

from swiglet.analysis.names import (
    RESERVED_NAMES,
    is_literal,
    is_number_literal,
    is_string_literal,
    is_valid_block_name,
    is_valid_name,
    is_valid_short_name,
    sanitize_name,
    unquote,
)

__all__ = [
    "RESERVED_NAMES",
    "is_literal",
    "is_number_literal",
    "is_string_literal",
    "is_valid_block_name",
    "is_valid_name",
    "is_valid_short_name",
    "sanitize_name",
    "unquote",
]
