"""Value, variable and condition parsing.

Grammar (whitespace allowed between tokens)::

    variable  := primary call? filter*
    value     := primary filter*
    primary   := NUMBER | STRING | true | false | null | list | object | chain
    chain     := IDENT ('.' IDENT | '[' value ']')*
    call      := '(' (value (',' value)*)? ')'
    filter    := '|' IDENT call?
    list      := '[' (value (',' value)* ','?)? ']'
    object    := '{' (key ':' value (',' key ':' value)* ','?)? '}'

Conditions (``if`` / ``else if``) are written as whitespace-separated
words: operands are values, operators are ``== != === !== < > <= >= in
&& || and or``, negation is ``!`` or ``not`` and parentheses attach to
words, as in ``{% if (a || !b) and c %}``.
"""

from __future__ import annotations

import re
from typing import Any

from swiglet.analysis.names import RESERVED_NAMES
from swiglet.environment.exceptions import ErrorCode, TemplateSyntaxError
from swiglet.nodes import (
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

_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z_0-9]*")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}
_KEYWORD_CONSTS: dict[str, Any] = {"true": True, "false": False, "null": None}

COMPARISON_OPERATORS = frozenset({"==", "!=", "===", "!==", "<", ">", "<=", ">=", "in"})
_BOOLEAN_OPERATORS = {"&&": "and", "and": "and", "||": "or", "or": "or"}


class ExpressionParser:
    """Recursive-descent parser over a single expression string.

    Attributes:
        text: Expression source
        lineno: Template line for error messages
    """

    __slots__ = ("_pos", "lineno", "text")

    def __init__(self, text: str, lineno: int = 0):
        self.text = text
        self.lineno = lineno
        self._pos = 0

    # ─────────────────────────────────────────────────────────────────────────
    # Entry points
    # ─────────────────────────────────────────────────────────────────────────

    def parse_variable(self) -> Variable:
        """Parse ``{{ }}`` content: a primary, optional call, filters."""
        value = self._parse_primary()
        args: tuple[Expr, ...] | None = None
        self._skip_ws()
        if self._peek() == "(":
            if not isinstance(value, Name):
                raise self._error("Only names can be called")
            args = self._parse_call_args()
        filters = self._parse_filters()
        self._expect_end()
        return Variable(lineno=self.lineno, value=value, args=args, filters=filters)

    def parse_value(self) -> Expr:
        """Parse a complete value (literal or lookup chain with filters)."""
        value = self._parse_filtered()
        self._expect_end()
        return value

    # ─────────────────────────────────────────────────────────────────────────
    # Grammar
    # ─────────────────────────────────────────────────────────────────────────

    def _parse_filtered(self) -> Expr:
        value = self._parse_primary()
        filters = self._parse_filters()
        if filters:
            return Filtered(lineno=self.lineno, value=value, filters=filters)
        return value

    def _parse_filters(self) -> tuple[Filter, ...]:
        filters: list[Filter] = []
        while True:
            self._skip_ws()
            if self._peek() != "|":
                return tuple(filters)
            self._pos += 1
            self._skip_ws()
            name = self._parse_ident("filter name")
            raw_args = ""
            args: tuple[Expr, ...] = ()
            self._skip_ws()
            if self._peek() == "(":
                start = self._pos + 1
                args = self._parse_call_args()
                raw_args = self.text[start : self._pos - 1]
            filters.append(Filter(lineno=self.lineno, name=name, raw_args=raw_args, args=args))

    def _parse_call_args(self) -> tuple[Expr, ...]:
        self._pos += 1  # (
        return tuple(self._parse_sequence(")"))

    def _parse_sequence(self, closer: str) -> list[Expr]:
        items: list[Expr] = []
        self._skip_ws()
        if self._peek() == closer:
            self._pos += 1
            return items
        while True:
            items.append(self._parse_filtered())
            self._skip_ws()
            char = self._peek()
            if char == ",":
                self._pos += 1
                self._skip_ws()
                if self._peek() == closer:
                    self._pos += 1
                    return items
                continue
            if char == closer:
                self._pos += 1
                return items
            raise self._error(f"Expected ',' or '{closer}'")

    def _parse_primary(self) -> Expr:
        self._skip_ws()
        char = self._peek()
        if not char:
            raise self._error("Expected a value")
        if char in "'\"":
            return Const(lineno=self.lineno, value=self._parse_string())
        if char == "[":
            self._pos += 1
            return ListLiteral(lineno=self.lineno, items=tuple(self._parse_sequence("]")))
        if char == "{":
            return self._parse_object()
        match = _NUMBER_RE.match(self.text, self._pos)
        if match and (char.isdigit() or char == "-"):
            self._pos = match.end()
            literal = match.group()
            value: int | float = float(literal) if "." in literal else int(literal)
            return Const(lineno=self.lineno, value=value)
        return self._parse_chain()

    def _parse_chain(self) -> Expr:
        start = self._pos
        root = self._parse_ident("name")
        if root in _KEYWORD_CONSTS:
            return Const(lineno=self.lineno, value=_KEYWORD_CONSTS[root])
        if root.startswith("__") or root in RESERVED_NAMES:
            raise self._error(f'Reserved name "{root}" cannot be used as a variable')

        path: list[Expr] = []
        while True:
            char = self._peek()
            if char == ".":
                self._pos += 1
                attr = self._parse_ident("attribute name")
                if attr.startswith("__"):
                    raise self._error(f'Reserved attribute "{attr}"')
                path.append(Const(lineno=self.lineno, value=attr))
            elif char == "[":
                self._pos += 1
                segment = self._parse_filtered()
                self._skip_ws()
                if self._peek() != "]":
                    raise self._error("Expected ']'")
                self._pos += 1
                path.append(segment)
            else:
                break
        return Name(
            lineno=self.lineno,
            root=root,
            path=tuple(path),
            source=self.text[start : self._pos],
        )

    def _parse_object(self) -> DictLiteral:
        self._pos += 1  # {
        keys: list[str] = []
        values: list[Expr] = []
        self._skip_ws()
        if self._peek() == "}":
            self._pos += 1
            return DictLiteral(lineno=self.lineno, keys=(), values=())
        while True:
            self._skip_ws()
            char = self._peek()
            if char in ("'", '"'):
                key = self._parse_string()
            elif char.isdigit():
                match = _NUMBER_RE.match(self.text, self._pos)
                if match is None:
                    raise self._error("Invalid object key")
                key = match.group()
                self._pos = match.end()
            else:
                key = self._parse_ident("object key")
            self._skip_ws()
            if self._peek() != ":":
                raise self._error("Expected ':' in object literal")
            self._pos += 1
            keys.append(key)
            values.append(self._parse_filtered())
            self._skip_ws()
            char = self._peek()
            self._pos += 1
            if char == "}":
                break
            if char != ",":
                raise self._error("Expected ',' or '}' in object literal")
            self._skip_ws()
            if self._peek() == "}":
                self._pos += 1
                break
        return DictLiteral(lineno=self.lineno, keys=tuple(keys), values=tuple(values))

    def _parse_string(self) -> str:
        quote = self.text[self._pos]
        self._pos += 1
        out: list[str] = []
        while self._pos < len(self.text):
            char = self.text[self._pos]
            self._pos += 1
            if char == "\\" and self._pos < len(self.text):
                nxt = self.text[self._pos]
                self._pos += 1
                out.append(_ESCAPES.get(nxt, nxt))
            elif char == quote:
                return "".join(out)
            else:
                out.append(char)
        raise self._error("Invalid string literal. Missing closing quote.")

    # ─────────────────────────────────────────────────────────────────────────
    # Scanner helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _parse_ident(self, what: str) -> str:
        match = _IDENT_RE.match(self.text, self._pos)
        if not match:
            raise self._error(f"Expected {what}")
        self._pos = match.end()
        return match.group()

    def _peek(self) -> str:
        return self.text[self._pos] if self._pos < len(self.text) else ""

    def _skip_ws(self) -> None:
        while self._pos < len(self.text) and self.text[self._pos].isspace():
            self._pos += 1

    def _expect_end(self) -> None:
        self._skip_ws()
        if self._pos != len(self.text):
            raise self._error(f"Unexpected {self.text[self._pos:]!r}")

    def _error(self, message: str) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            f'{message} in "{self.text}" on line {self.lineno}.',
            self.lineno,
            code=ErrorCode.INVALID_ARGUMENTS,
        )


def parse_value(text: str, lineno: int = 0) -> Expr:
    """Parse a tag argument or filter argument into an expression."""
    return ExpressionParser(text, lineno).parse_value()


def parse_variable(text: str, lineno: int = 0) -> Variable:
    """Parse the inside of ``{{ }}`` (or a ``set`` value)."""
    return ExpressionParser(text, lineno).parse_variable()


# ─────────────────────────────────────────────────────────────────────────────
# Conditions
# ─────────────────────────────────────────────────────────────────────────────


def parse_condition(words: list[str], lineno: int) -> Expr:
    """Parse ``if`` arguments into an expression tree.

    Precedence, loosest first: ``or``, ``and``, comparisons (including
    ``in``, left-associative), then ``not``/``!`` on a single operand or
    parenthesized group.

    Raises:
        TemplateSyntaxError: Unbalanced parentheses, two operators or two
            operands in a row, or a dangling operator.
    """
    error = TemplateSyntaxError(
        f"Bad if-syntax in `{{% if {' '.join(words)} %}}...` on line {lineno}.",
        lineno,
        code=ErrorCode.INVALID_ARGUMENTS,
    )
    tokens = _tokenize_condition(words, lineno, error)
    if not tokens:
        raise error
    parser = _ConditionParser(tokens, lineno, error)
    expr = parser.parse_or()
    if parser.pos != len(tokens):
        raise error
    return expr


def _tokenize_condition(
    words: list[str], lineno: int, error: TemplateSyntaxError
) -> list[tuple[str, Any]]:
    tokens: list[tuple[str, Any]] = []
    depth = 0
    prev: str | None = None

    for word in words:
        if word in ("not", "!"):
            tokens.append(("not", None))
            continue
        if word in COMPARISON_OPERATORS or word in _BOOLEAN_OPERATORS:
            if prev == "op":
                raise error
            if word in _BOOLEAN_OPERATORS:
                tokens.append(("bool", _BOOLEAN_OPERATORS[word]))
            else:
                tokens.append(("cmp", word))
            prev = "op"
            continue

        while word and (word[0] == "(" or (word[0] == "!" and word[1:2] != "=")):
            if word[0] == "(":
                depth += 1
                tokens.append(("(", None))
            else:
                tokens.append(("not", None))
            word = word[1:]

        closing = 0
        while word.endswith(")") and word.count(")") > word.count("("):
            closing += 1
            word = word[:-1]

        if word:
            if prev == "value":
                raise error
            tokens.append(("value", parse_value(word, lineno)))
            prev = "value"

        for _ in range(closing):
            if not depth:
                raise error
            depth -= 1
            tokens.append((")", None))

    if depth:
        raise error
    return tokens


class _ConditionParser:
    __slots__ = ("error", "lineno", "pos", "tokens")

    def __init__(
        self, tokens: list[tuple[str, Any]], lineno: int, error: TemplateSyntaxError
    ):
        self.tokens = tokens
        self.lineno = lineno
        self.error = error
        self.pos = 0

    def _peek(self) -> tuple[str, Any]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return ("eof", None)

    def parse_or(self) -> Expr:
        left = self.parse_and()
        while self._peek() == ("bool", "or"):
            self.pos += 1
            left = BoolOp(lineno=self.lineno, op="or", left=left, right=self.parse_and())
        return left

    def parse_and(self) -> Expr:
        left = self.parse_compare()
        while self._peek() == ("bool", "and"):
            self.pos += 1
            left = BoolOp(lineno=self.lineno, op="and", left=left, right=self.parse_compare())
        return left

    def parse_compare(self) -> Expr:
        left = self.parse_unary()
        while self._peek()[0] == "cmp":
            op = self.tokens[self.pos][1]
            self.pos += 1
            left = Compare(lineno=self.lineno, op=op, left=left, right=self.parse_unary())
        return left

    def parse_unary(self) -> Expr:
        kind, value = self._peek()
        self.pos += 1
        if kind == "not":
            return Not(lineno=self.lineno, operand=self.parse_unary())
        if kind == "(":
            expr = self.parse_or()
            if self._peek()[0] != ")":
                raise self.error
            self.pos += 1
            return expr
        if kind == "value":
            return value
        raise self.error
