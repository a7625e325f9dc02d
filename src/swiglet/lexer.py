"""Lexer: split template source into data, variable, block and comment segments.

The source is split on three delimiter patterns:

- ``{{ ... }}`` variable interpolation (single line)
- ``{% ... %}`` logic tag (may span lines)
- ``{# ... #}`` comment (may span lines)

Everything between them is DATA. Line numbers count every newline in every
segment, comments and raw text included, so parse errors point at the right
line.

Example:
        >>> [t.type.name for t in tokenize("Hi {{ name }}{# note #}!")]
        ['DATA', 'VARIABLE', 'COMMENT', 'DATA', 'EOF']

"""

from __future__ import annotations

import re

from swiglet._types import Token, TokenType
from swiglet.environment.exceptions import ErrorCode, LexerError

_SPLIT_RE = re.compile(r"(\{%[^\r]*?%\}|\{\{.*?\}\}|\{#[^\r]*?#\})")

RAW_START_RE = re.compile(r"^\{%\s*-?\s*raw\s*-?\s*%\}$")
RAW_END_RE = re.compile(r"^\{%\s*-?\s*endraw\s*-?\s*%\}$")

_OPENERS = (
    ("{%", "logic tag", ErrorCode.UNCLOSED_TAG),
    ("{{", "variable tag", ErrorCode.UNCLOSED_VARIABLE),
    ("{#", "comment", ErrorCode.UNCLOSED_COMMENT),
)

__all__ = ["Lexer", "LexerError", "tokenize"]


class Lexer:
    """Template lexer.

    Attributes:
        source: Template source text
        name: Template name for error messages
        filename: Source file path for error messages
    """

    __slots__ = ("filename", "name", "source")

    def __init__(
        self,
        source: str,
        name: str | None = None,
        filename: str | None = None,
    ):
        self.source = source
        self.name = name
        self.filename = filename

    def tokenize(self) -> list[Token]:
        """Split the source into tokens, ending with an EOF token."""
        tokens: list[Token] = []
        lineno = 1
        in_raw = False

        for index, segment in enumerate(_SPLIT_RE.split(self.source)):
            if index % 2 == 0:
                if segment:
                    # Raw blocks may contain unbalanced delimiters
                    if not in_raw:
                        self._check_unclosed(segment, lineno)
                    tokens.append(Token(TokenType.DATA, segment, lineno))
            elif segment.startswith("{%"):
                if RAW_START_RE.match(segment):
                    in_raw = True
                elif RAW_END_RE.match(segment):
                    in_raw = False
                tokens.append(Token(TokenType.BLOCK, segment, lineno))
            elif segment.startswith("{{"):
                tokens.append(Token(TokenType.VARIABLE, segment, lineno))
            else:
                tokens.append(Token(TokenType.COMMENT, segment, lineno))
            lineno += segment.count("\n")

        tokens.append(Token(TokenType.EOF, "", lineno))
        return tokens

    def _check_unclosed(self, data: str, lineno: int) -> None:
        """Raise if a DATA segment holds an opening delimiter with no closer."""
        found: list[tuple[int, str, ErrorCode]] = []
        for opener, what, code in _OPENERS:
            pos = data.find(opener)
            if pos != -1:
                found.append((pos, what, code))
        if not found:
            return
        pos, what, code = min(found)
        line = lineno + data.count("\n", 0, pos)
        raise LexerError(
            f"Unclosed {what} on line {line}.",
            line,
            name=self.name,
            filename=self.filename,
            source=self.source,
            code=code,
        )


def tokenize(
    source: str,
    name: str | None = None,
    filename: str | None = None,
) -> list[Token]:
    """Tokenize template source (convenience wrapper around Lexer)."""
    return Lexer(source, name=name, filename=filename).tokenize()
