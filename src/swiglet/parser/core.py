"""Token tree parser.

Turns the lexer's flat segment list into a tree: tags whose spec ``ends``
own the tokens up to their ``end<name>`` tag. Comments are dropped, raw
blocks collapse into one ``Data`` node and ``autoescape`` blocks switch the
escape type handed to every ``Output`` they contain.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from swiglet._types import Token, TokenType
from swiglet.analysis.names import is_string_literal, unquote
from swiglet.environment.exceptions import ErrorCode, TemplateSyntaxError
from swiglet.lexer import RAW_END_RE, RAW_START_RE
from swiglet.nodes import Const, Data, Output, StripFlags, Tag, Variable
from swiglet.parser.arguments import MalformedArguments, regroup_args
from swiglet.parser.expressions import parse_variable

if TYPE_CHECKING:
    from swiglet.environment.tags import TagSpec
    from swiglet.nodes import Node

_ESCAPE_FILTERS = frozenset({"e", "escape"})


class Parser:
    """Build the token tree for one template.

    Args:
        tokens: Output of ``Lexer.tokenize()``
        tags: Tag registry (name -> ``TagSpec``)
        autoescape: Initial escape type: True/"html", "js", or False/None
        name: Template name for error messages
        filename: Source file for error messages
        source: Template source for error snippets

    Example:
            >>> from swiglet.environment.tags import DEFAULT_TAGS
            >>> from swiglet.lexer import tokenize
            >>> Parser(tokenize("{% if a %}x{% endif %}"), DEFAULT_TAGS).parse()
            [<Tag if 'a' line 1>]

    """

    def __init__(
        self,
        tokens: list[Token],
        tags: Mapping[str, TagSpec],
        autoescape: bool | str | None = True,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ):
        self.tokens = tokens
        self.tags = tags
        self.name = name
        self.filename = filename
        self.source = source
        self._escape = _escape_type(autoescape)

    def parse(self) -> list[Node | Tag]:
        """Parse all tokens and return the top-level sequence."""
        root: list[Node | Tag] = []
        stack: list[list[Node | Tag]] = [root]
        open_tags: list[Tag] = []
        escape_stack: list[str | None] = []
        raw: list[str] | None = None
        raw_line = 0

        for token in self.tokens:
            if raw is not None:
                if token.type is TokenType.EOF:
                    break
                if token.type is TokenType.BLOCK and RAW_END_RE.match(token.value):
                    if raw:
                        stack[-1].append(Data(lineno=raw_line, value="".join(raw)))
                    raw = None
                else:
                    raw.append(token.value)
                continue

            if token.type is TokenType.EOF:
                break
            if token.type is TokenType.COMMENT:
                continue
            if token.type is TokenType.DATA:
                stack[-1].append(Data(lineno=token.lineno, value=token.value))
                continue
            if token.type is TokenType.VARIABLE:
                stack[-1].append(self._parse_output(token))
                continue
            if RAW_START_RE.match(token.value):
                raw = []
                raw_line = token.lineno
                continue
            before, after, name, rest = self._split_tag(token)

            if name.startswith("end") and name not in self.tags:
                if not open_tags:
                    raise self._error(
                        f'Unexpected end tag "{name}" at line {token.lineno}.',
                        token.lineno,
                        ErrorCode.MISMATCHED_END,
                    )
                opener = open_tags[-1]
                if opener.name != name[3:]:
                    raise self._error(
                        f'Expected end tag for "{opener.name}", but found "{name}" '
                        f"at line {token.lineno}.",
                        token.lineno,
                        ErrorCode.MISMATCHED_END,
                    )
                if opener.name == "autoescape":
                    self._escape = escape_stack.pop()
                opener.strip.end = before
                opener.strip.after = after
                open_tags.pop()
                stack.pop()
                continue

            spec = self.tags.get(name)
            if spec is None:
                raise self._error(
                    f'Unknown logic tag at line {token.lineno}: "{name}".',
                    token.lineno,
                    ErrorCode.UNKNOWN_TAG,
                )

            try:
                args = regroup_args(rest)
            except MalformedArguments:
                raise self._error(
                    f'Malformed arguments sent to tag "{name}" on line {token.lineno}.',
                    token.lineno,
                    ErrorCode.INVALID_ARGUMENTS,
                ) from None

            tag = Tag(
                lineno=token.lineno,
                name=name,
                args=args,
                spec=spec,
                parents=tuple(t.name for t in open_tags),
                strip=StripFlags(before=before, after=after),
            )
            stack[-1].append(tag)

            if name == "autoescape":
                escape_stack.append(self._escape)
                self._escape = self._autoescape_type(tag)

            if spec.ends:
                tag.strip.start = after
                tag.strip.after = False
                open_tags.append(tag)
                stack.append(tag.body)

        if raw is not None:
            raise self._error(
                f'Missing expected end tag for "raw" on line {raw_line}.',
                raw_line,
                ErrorCode.UNCLOSED_RAW,
            )
        if open_tags:
            opener = open_tags[-1]
            raise self._error(
                f'Missing end tag for "{opener.name}" that was opened on line {opener.lineno}.',
                opener.lineno,
                ErrorCode.UNCLOSED_BLOCK,
            )
        return root

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _split_tag(self, token: Token) -> tuple[bool, bool, str, str]:
        """Split ``{%- name args -%}`` into strip flags, name and argument text."""
        inner = token.inner.strip()
        before = inner.startswith("-")
        if before:
            inner = inner[1:].lstrip()
        after = inner.endswith("-")
        if after:
            inner = inner[:-1].rstrip()
        parts = inner.split(None, 1)
        if not parts:
            raise self._error(
                f"Empty logic tag on line {token.lineno}.",
                token.lineno,
                ErrorCode.UNKNOWN_TAG,
            )
        rest = parts[1] if len(parts) > 1 else ""
        return before, after, parts[0], rest

    def _parse_output(self, token: Token) -> Output:
        """Parse ``{{ expr }}``, folding ``raw`` / ``escape`` into the escape type."""
        text = token.inner.strip()
        if not text:
            empty = Variable(
                lineno=token.lineno,
                value=Const(lineno=token.lineno, value=""),
                args=None,
                filters=(),
            )
            return Output(lineno=token.lineno, value=empty, escape=None)

        variable = parse_variable(text, token.lineno)
        escape = self._escape
        explicit = False
        kept = []
        for flt in variable.filters:
            if flt.name == "raw":
                escape = None
                explicit = False
            elif flt.name in _ESCAPE_FILTERS:
                arg = flt.args[0] if flt.args else None
                escape = "js" if isinstance(arg, Const) and arg.value == "js" else "html"
                explicit = True
            else:
                kept.append(flt)

        if len(kept) != len(variable.filters):
            variable = Variable(
                lineno=variable.lineno,
                value=variable.value,
                args=variable.args,
                filters=tuple(kept),
            )
        return Output(lineno=token.lineno, value=variable, escape=escape, explicit=explicit)

    def _autoescape_type(self, tag: Tag) -> str | None:
        args = tag.args
        if not args or args[0] == "true":
            if len(args) < 2:
                return "html"
            kind = unquote(args[1]) if is_string_literal(args[1]) else args[1]
            if len(args) == 2 and kind in ("html", "js"):
                return kind
        elif args == ["false"]:
            return None
        raise self._error(
            f'Invalid arguments sent to tag "autoescape" on line {tag.lineno}.',
            tag.lineno,
            ErrorCode.INVALID_ARGUMENTS,
        )

    def _error(self, message: str, lineno: int, code: ErrorCode) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            lineno,
            name=self.name,
            filename=self.filename,
            source=self.source,
            code=code,
        )


def _escape_type(autoescape: bool | str | None) -> str | None:
    if autoescape is True:
        return "html"
    if not autoescape:
        return None
    return str(autoescape)
