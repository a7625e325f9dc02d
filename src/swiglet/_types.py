"""Token types shared by the lexer and parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Kinds of raw source segments produced by the lexer."""

    DATA = "data"
    VARIABLE = "variable"
    BLOCK = "block"
    COMMENT = "comment"
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    """A raw source segment.

    ``value`` is the full segment text, delimiters included, so raw blocks
    can reproduce tag-like text verbatim. ``inner`` strips the delimiters.
    """

    type: TokenType
    value: str
    lineno: int

    @property
    def inner(self) -> str:
        if self.type in (TokenType.VARIABLE, TokenType.BLOCK, TokenType.COMMENT):
            return self.value[2:-2]
        return self.value

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, line {self.lineno})"
