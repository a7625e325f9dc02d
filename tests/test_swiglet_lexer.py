"""Test the swiglet lexer.

Covers segment splitting, line counting, raw-block passthrough and unclosed
delimiter errors.
"""

import pytest

from swiglet._types import TokenType
from swiglet.environment.exceptions import ErrorCode
from swiglet.lexer import Lexer, LexerError, tokenize


def types(source: str) -> list[str]:
    return [t.type.name for t in tokenize(source)]


class TestSegments:
    """Splitting source into DATA / VARIABLE / BLOCK / COMMENT."""

    def test_plain_text(self):
        tokens = tokenize("Hello World")
        assert tokens[0].type is TokenType.DATA
        assert tokens[0].value == "Hello World"
        assert tokens[-1].type is TokenType.EOF

    def test_empty_source(self):
        assert types("") == ["EOF"]

    def test_mixed(self):
        assert types("Hi {{ name }}{# note #}{% if x %}!{% endif %}") == [
            "DATA",
            "VARIABLE",
            "COMMENT",
            "BLOCK",
            "DATA",
            "BLOCK",
            "EOF",
        ]

    def test_inner_strips_delimiters(self):
        token = tokenize("{{ user.name }}")[0]
        assert token.value == "{{ user.name }}"
        assert token.inner == " user.name "

    def test_logic_tag_spans_lines(self):
        tokens = tokenize("{% if a\n   and b %}x{% endif %}")
        assert tokens[0].type is TokenType.BLOCK
        assert tokens[0].value == "{% if a\n   and b %}"

    def test_comment_spans_lines(self):
        assert types("{# one\ntwo #}") == ["COMMENT", "EOF"]

    def test_variable_cannot_span_lines(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("{{ a\n}}")
        assert exc_info.value.code is ErrorCode.UNCLOSED_VARIABLE

    def test_lone_braces_are_data(self):
        assert types("function () { return 1; }") == ["DATA", "EOF"]


class TestLineNumbers:
    """Line counting over every segment."""

    def test_lines_after_data(self):
        tokens = tokenize("a\nb\n{{ x }}")
        assert tokens[1].lineno == 3

    def test_lines_counted_inside_comments(self):
        tokens = tokenize("{# a\nb\nc #}{{ x }}")
        assert tokens[1].lineno == 3

    def test_lines_counted_inside_tags(self):
        tokens = tokenize("{% if a\nor b %}{{ x }}{% endif %}")
        assert tokens[1].lineno == 2

    def test_eof_line(self):
        assert tokenize("a\nb\nc")[-1].lineno == 3


class TestUnclosed:
    """Opening delimiters without a closer."""

    @pytest.mark.parametrize(
        ("source", "code"),
        [
            ("Hello {% if", ErrorCode.UNCLOSED_TAG),
            ("Hello {{ name", ErrorCode.UNCLOSED_VARIABLE),
            ("Hello {# note", ErrorCode.UNCLOSED_COMMENT),
        ],
    )
    def test_unclosed(self, source, code):
        with pytest.raises(LexerError) as exc_info:
            tokenize(source)
        assert exc_info.value.code is code
        assert exc_info.value.lineno == 1

    def test_error_names_line(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("one\ntwo\nthree {{ oops")
        assert exc_info.value.lineno == 3
        assert "line 3" in exc_info.value.message

    def test_error_names_template(self):
        with pytest.raises(LexerError) as exc_info:
            Lexer("{{ x", name="page.html").tokenize()
        assert "page.html" in str(exc_info.value)

    def test_raw_allows_unbalanced_delimiters(self):
        tokens = tokenize("{% raw %}{{ not closed {# either {% endraw %}")
        assert [t.type.name for t in tokens] == ["BLOCK", "DATA", "BLOCK", "EOF"]
