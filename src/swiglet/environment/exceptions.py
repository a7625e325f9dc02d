"""Exceptions for the swiglet template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError       # Template not found by loader
├── TemplateSyntaxError         # Parse-time syntax error
│   ├── LexerError              # Unclosed delimiters
│   └── TemplateResolutionError # extends/block structure errors
└── TemplateRuntimeError        # Render-time error with context

Error Messages:
Syntax errors name the template and line and, when the source is known,
show the offending line:

    ```
    Syntax Error: Unknown logic tag at line 3: "frobnicate".
      --> page.html:3
       |
      3 | {% frobnicate %}
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for swiglet template errors.

    Format: S-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), RES (inheritance resolution),
    RUN (runtime), TPL (template loading)
    """

    # Lexer errors (S-LEX-xxx)
    UNCLOSED_TAG = "S-LEX-001"
    UNCLOSED_COMMENT = "S-LEX-002"
    UNCLOSED_VARIABLE = "S-LEX-003"

    # Parser errors (S-PAR-xxx)
    UNKNOWN_TAG = "S-PAR-001"
    UNCLOSED_BLOCK = "S-PAR-002"
    MISMATCHED_END = "S-PAR-003"
    INVALID_ARGUMENTS = "S-PAR-004"
    INVALID_NAME = "S-PAR-005"
    UNCLOSED_RAW = "S-PAR-006"

    # Resolution errors (S-RES-xxx)
    CIRCULAR_EXTENDS = "S-RES-001"
    MISPLACED_EXTENDS = "S-RES-002"
    NESTED_BLOCK = "S-RES-003"

    # Runtime errors (S-RUN-xxx)
    RUNTIME_ERROR = "S-RUN-001"

    # Template loading errors (S-TPL-xxx)
    TEMPLATE_NOT_FOUND = "S-TPL-001"
    SYNTAX_ERROR = "S-TPL-002"


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int

    def format(self) -> str:
        """Format snippet with line numbers, marking the error line with ``>``."""
        parts: list[str] = ["   |"]
        for lineno, content in self.lines:
            marker = ">" if lineno == self.error_line else " "
            parts.append(f"{marker}{lineno:>3} | {content}")
        parts.append("   |")
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line)


class TemplateError(Exception):
    """Base exception for all swiglet template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a short human-readable summary.

        Used for the error markers rendered in place of template output.
        """
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class TemplateNotFoundError(TemplateError):
    """Template not found by any configured loader.

    Example:
            >>> env.compile_file("nonexistent.html")
        TemplateNotFoundError: Template 'nonexistent.html' not found in: templates/

    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Parse-time syntax error in template source.

    Raised by the lexer, the parser and the tag compilers when template
    syntax is invalid. ``message`` is the bare description (it already names
    the line, following the engine's message conventions); ``str(exc)``
    adds location and, when ``source`` is known, the offending line.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.filename = filename
        self.source = source
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    @property
    def location(self) -> str:
        location = self.filename or self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
        return location

    def _format_message(self) -> str:
        header = f"Syntax Error: {self.message}\n  --> {self.location}"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                error_line = lines[self.lineno - 1]
                return header + f"\n   |\n{self.lineno:>3} | {error_line}"

        return header

    def with_template(
        self,
        name: str | None,
        filename: str | None,
        source: str | None,
    ) -> TemplateSyntaxError:
        """Return a copy of this error that names the template it came from.

        Tag compilers raise errors knowing only the line; the compiler
        attaches template identity before the error leaves ``compile()``.
        """
        if self.name or self.filename:
            return self
        err = type(self).__new__(type(self))
        TemplateSyntaxError.__init__(
            err,
            self.message,
            self.lineno,
            name=name,
            filename=filename,
            source=source,
            code=self.code,
        )
        return err

    def format_compact(self) -> str:
        code_prefix = f"{self.code.value}: " if self.code else ""
        return f"{code_prefix}{self.message}\n  --> {self.location}"


class LexerError(TemplateSyntaxError):
    """An opening delimiter was never closed."""

    code: ErrorCode | None = ErrorCode.UNCLOSED_TAG


class TemplateResolutionError(TemplateSyntaxError):
    """Invalid inheritance structure (circular or misplaced extends, nested blocks)."""

    code: ErrorCode | None = ErrorCode.CIRCULAR_EXTENDS


class TemplateRuntimeError(TemplateError):
    """Render-time error with template location.

    Raised when an exception escapes a render procedure and the environment
    lets errors propagate (``allow_errors=True``). Otherwise the same text
    is emitted as an inline error marker.

    Output Format:
            ```
            Runtime Error: unsupported operand type(s) for +: 'int' and 'str'
              Location: article.html:15
               |
            > 15 | {{ total|add(label) }}
               |
            ```

    Attributes:
        message: Error description
        template_name: Name of the template
        lineno: Line number in template source
        source_snippet: Surrounding template lines
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        lineno: int | None = None,
        source_snippet: SourceSnippet | None = None,
    ):
        self.message = message
        self.template_name = template_name
        self.lineno = lineno
        self.source_snippet = source_snippet
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            loc = self.template_name or "<template>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {loc}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        return "\n".join(parts)
