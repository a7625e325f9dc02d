"""Test the swiglet token tree parser.

Tests end-tag pairing, tag argument grouping, raw blocks, autoescape
marking and whitespace-strip flags.
"""

import pytest

from swiglet.environment.exceptions import ErrorCode, TemplateSyntaxError
from swiglet.environment.tags import DEFAULT_TAGS
from swiglet.lexer import tokenize
from swiglet.nodes import Const, Data, Output, Tag
from swiglet.parser import Parser
from swiglet.parser.arguments import MalformedArguments, regroup_args


def parse(source: str, autoescape=True):
    return Parser(tokenize(source), DEFAULT_TAGS, autoescape, source=source).parse()


class TestTree:
    """Building the token tree."""

    def test_text_and_output(self):
        nodes = parse("Hello {{ name }}!")
        assert isinstance(nodes[0], Data)
        assert isinstance(nodes[1], Output)
        assert nodes[2].value == "!"

    def test_comments_dropped(self):
        nodes = parse("a{# hidden #}b")
        assert [n.value for n in nodes] == ["a", "b"]

    def test_block_tag_owns_body(self):
        nodes = parse("{% if a %}yes{% endif %}after")
        assert len(nodes) == 2
        tag = nodes[0]
        assert isinstance(tag, Tag)
        assert tag.name == "if"
        assert tag.args == ["a"]
        assert [n.value for n in tag.body] == ["yes"]

    def test_inline_tag_has_no_body(self):
        nodes = parse('{% set x = 1 %}{% include "a.html" %}')
        assert [n.name for n in nodes] == ["set", "include"]
        assert nodes[0].body == []

    def test_parents_recorded(self):
        nodes = parse("{% for x in y %}{% if x %}{% set z = x %}{% endif %}{% endfor %}")
        inner_if = nodes[0].body[0]
        assert inner_if.parents == ("for",)
        assert inner_if.body[0].parents == ("for", "if")

    def test_line_numbers(self):
        nodes = parse("a\n{% if b %}\n{{ c }}\n{% endif %}")
        tag = nodes[1]
        assert tag.lineno == 2
        assert tag.body[1].lineno == 3

    def test_empty_output(self):
        """``{{ }}`` prints nothing instead of failing."""
        (node,) = parse("{{ }}")
        assert isinstance(node.value.value, Const)
        assert node.value.value.value == ""


class TestEndTags:
    """Pairing ``{% name %}`` with ``{% endname %}``."""

    def test_unexpected_end_tag(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse("text{% endif %}")
        assert exc_info.value.message == 'Unexpected end tag "endif" at line 1.'
        assert exc_info.value.code is ErrorCode.MISMATCHED_END

    def test_mismatched_end_tag(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse("{% if a %}\n{% endfor %}")
        assert exc_info.value.message == (
            'Expected end tag for "if", but found "endfor" at line 2.'
        )

    def test_missing_end_tag(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse("{% for x in y %}\n{% if x %}{% endfor %}")
        assert "Expected end tag" in exc_info.value.message

    def test_unclosed_block(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse("line one\n{% if a %}never closed")
        assert exc_info.value.message == (
            'Missing end tag for "if" that was opened on line 2.'
        )
        assert exc_info.value.code is ErrorCode.UNCLOSED_BLOCK

    def test_unknown_tag(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse("{% frobnicate %}")
        assert exc_info.value.message == 'Unknown logic tag at line 1: "frobnicate".'
        assert exc_info.value.code is ErrorCode.UNKNOWN_TAG

    def test_error_shows_source_line(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse("ok\n{% frobnicate %}")
        assert "{% frobnicate %}" in str(exc_info.value)


class TestArguments:
    """Tag argument scanning."""

    def test_words(self):
        assert regroup_args("x in items") == ["x", "in", "items"]

    def test_quoted_strings_keep_spaces(self):
        assert regroup_args('title = "Hello World"') == ["title", "=", '"Hello World"']

    def test_objects_and_lists_keep_spaces(self):
        assert regroup_args('user = {"name": "Ada Lovelace", "tags": [1, 2]}') == [
            "user",
            "=",
            '{"name": "Ada Lovelace", "tags": [1, 2]}',
        ]

    def test_escaped_quote(self):
        assert regroup_args(r'"say \"hi\""') == [r'"say \"hi\""']

    def test_parentheses_left_alone(self):
        assert regroup_args("(a or b) and c") == ["(a", "or", "b)", "and", "c"]

    @pytest.mark.parametrize("text", ['"open', "[1, 2", "{a: 1"])
    def test_unterminated(self, text):
        with pytest.raises(MalformedArguments):
            regroup_args(text)

    def test_malformed_tag_arguments(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse('{% set x = "abc %}')
        assert exc_info.value.message == 'Malformed arguments sent to tag "set" on line 1.'


class TestRaw:
    """``{% raw %}`` passthrough."""

    def test_raw_becomes_data(self):
        (node,) = parse("{% raw %}{{ x }}{% if %}{% endraw %}")
        assert isinstance(node, Data)
        assert node.value == "{{ x }}{% if %}"

    def test_empty_raw(self):
        assert parse("{% raw %}{% endraw %}") == []

    def test_unclosed_raw(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse("{% raw %}{{ x }}")
        assert exc_info.value.message == 'Missing expected end tag for "raw" on line 1.'


class TestEscapeMarking:
    """Escape type attached to each output."""

    def test_default_html(self):
        (node,) = parse("{{ x }}")
        assert node.escape == "html"

    def test_autoescape_disabled(self):
        (node,) = parse("{{ x }}", autoescape=False)
        assert node.escape is None

    def test_raw_filter_removed(self):
        (node,) = parse("{{ x|raw }}")
        assert node.escape is None
        assert node.value.filters == ()

    def test_escape_filter_kind(self):
        (node,) = parse('{{ x|e("js") }}', autoescape=False)
        assert node.escape == "js"
        (node,) = parse("{{ x|escape }}", autoescape=False)
        assert node.escape == "html"

    def test_escape_filter_marked_explicit(self):
        (node,) = parse("{{ x }}")
        assert not node.explicit
        (node,) = parse("{{ x|e }}")
        assert node.explicit
        (node,) = parse("{{ x|e|raw }}")
        assert not node.explicit

    def test_other_filters_kept(self):
        (node,) = parse("{{ x|upper|raw }}")
        assert [f.name for f in node.value.filters] == ["upper"]

    @pytest.mark.parametrize(
        ("args", "expected"),
        [
            ("", "html"),
            ("true", "html"),
            ("false", None),
            ('true "js"', "js"),
            ("true js", "js"),
        ],
    )
    def test_autoescape_block(self, args, expected):
        tag = parse(f"{{% autoescape {args} %}}{{{{ x }}}}{{% endautoescape %}}")[0]
        assert tag.body[0].escape == expected

    def test_autoescape_restored_after_block(self):
        nodes = parse("{% autoescape false %}{{ a }}{% endautoescape %}{{ b }}")
        assert nodes[0].body[0].escape is None
        assert nodes[1].escape == "html"

    def test_invalid_autoescape_arguments(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse("{% autoescape maybe %}{% endautoescape %}")
        assert 'Invalid arguments sent to tag "autoescape"' in exc_info.value.message


class TestStripFlags:
    """``{%-`` and ``-%}`` markers."""

    def test_flags_on_block_tag(self):
        (tag,) = parse("{%- if a -%} x {%- endif -%}")
        assert tag.strip.before
        assert tag.strip.start
        assert tag.strip.end
        assert tag.strip.after

    def test_flags_on_inline_tag(self):
        (tag,) = parse("{% set a = 1 -%}")
        assert not tag.strip.before
        assert tag.strip.after

    def test_trimmed_body(self):
        (tag,) = parse("{% if a -%}  x  {%- endif %}")
        assert [n.value for n in tag.trimmed_body()] == ["x"]
