"""Test the built-in filters and filter dispatch.

Every built-in filter is exercised through templates. Filters are total,
so inputs of the wrong shape are covered alongside the normal cases.
"""

from datetime import datetime, timezone

import pytest

from swiglet import Environment, Markup
from swiglet.environment.filters import DEFAULT_FILTERS

from .conftest import render


class TestStringFilters:
    """Case, tag and quoting filters."""

    @pytest.mark.parametrize(
        ("source", "ctx", "expected"),
        [
            ("{{ s|lower }}", {"s": "HeLLo"}, "hello"),
            ("{{ s|upper }}", {"s": "HeLLo"}, "HELLO"),
            ("{{ s|capitalize }}", {"s": "hELLO wORLD"}, "Hello world"),
            ("{{ s|title }}", {"s": "hELLO wORLD"}, "Hello World"),
            ("{{ s|striptags }}", {"s": "<p>Hi <b>there</b></p>"}, "Hi there"),
            ("{{ s|addslashes }}", {"s": "it's \"x\""}, "it\\'s \\\"x\\\""),
            ("{{ n|upper }}", {"n": 5}, "5"),
        ],
    )
    def test_string_filter(self, env_raw, source, ctx, expected):
        assert render(env_raw, source, ctx) == expected

    def test_maps_over_lists(self, env_raw):
        assert render(env_raw, "{{ items|upper }}", items=["a", "b"]) == "A,B"

    def test_maps_over_dict_values(self, env_raw):
        source = "{% set d = data|upper %}{{ d.x }}{{ d.y }}"
        assert render(env_raw, source, data={"x": "a", "y": "b"}) == "AB"

    def test_chain_left_to_right(self, env_raw):
        assert render(env_raw, "{{ s|upper|capitalize }}", s="hello") == "Hello"


class TestReplace:
    """Regular-expression ``replace``."""

    def test_first_match_only(self, env_raw):
        assert render(env_raw, '{{ s|replace("o", "0") }}', s="foo") == "f0o"

    def test_global(self, env_raw):
        assert render(env_raw, '{{ s|replace("o", "0", "g") }}', s="foo") == "f00"

    def test_ignore_case(self, env_raw):
        assert render(env_raw, '{{ s|replace("O", "0", "gi") }}', s="foo") == "f00"

    def test_pattern(self, env_raw):
        assert render(env_raw, '{{ s|replace("[aeiou]", "", "g") }}', s="template") == "tmplt"

    def test_group_reference(self, env_raw):
        source = '{{ s|replace("(\\\\w+)@(\\\\w+)", "$2 at $1") }}'
        assert render(env_raw, source, s="ada@home") == "home at ada"

    def test_whole_match_and_dollar(self, env_raw):
        assert render(env_raw, '{{ s|replace("b", "[$&$$]") }}', s="abc") == "a[b$]c"

    def test_invalid_pattern_returns_input(self, env_raw):
        assert render(env_raw, '{{ s|replace("(", "x") }}', s="a(b") == "a(b"


class TestCollectionFilters:
    """Filters over lists, strings and mappings."""

    @pytest.mark.parametrize(
        ("source", "ctx", "expected"),
        [
            ("{{ items|first }}", {"items": [3, 2, 1]}, "3"),
            ("{{ items|last }}", {"items": [3, 2, 1]}, "1"),
            ("{{ s|first }}{{ s|last }}", {"s": "abc"}, "ac"),
            ("[{{ n|first }}]", {"n": 5}, "[]"),
            ("[{{ d|last }}]", {"d": {"a": 1}}, "[]"),
            ("[{{ items|first }}]", {"items": []}, "[]"),
            ("{{ items|join(', ') }}", {"items": ["a", "b", "c"]}, "a, b, c"),
            ("{{ items|join }}", {"items": [1, 2]}, "1,2"),
            ("{{ d|join('-') }}", {"d": {"x": 1, "y": 2}}, "1-2"),
            ("{{ s|join('-') }}", {"s": "abc"}, "abc"),
            ("{{ items|join(sep) }}", {"items": ["a", "b"], "sep": "/"}, "a/b"),
            ("{{ items|length }}", {"items": [1, 2, 3]}, "3"),
            ("{{ s|length }}", {"s": "hello"}, "5"),
            ("{{ d|length }}", {"d": {"a": 1}}, "1"),
            ("[{{ n|length }}]", {"n": 7}, "[]"),
            ("{{ items|reverse }}", {"items": [1, 2, 3]}, "3,2,1"),
            ("{{ s|reverse }}", {"s": "abc"}, "abc"),
            ("{{ items|uniq }}", {"items": [1, 2, 1, 3, 2]}, "1,2,3"),
            ("[{{ s|uniq }}]", {"s": "aab"}, "[]"),
        ],
    )
    def test_collection_filter(self, env_raw, source, ctx, expected):
        assert render(env_raw, source, ctx) == expected

    def test_uniq_unhashable(self, env_raw):
        source = "{{ items|uniq|length }}"
        assert render(env_raw, source, items=[[1], [1], [2]]) == "2"


class TestValueFilters:
    """add, default, json_encode, url encoding."""

    @pytest.mark.parametrize(
        ("source", "ctx", "expected"),
        [
            ("{{ a|add(b) }}", {"a": 1, "b": 2}, "3"),
            ("{{ a|add(b) }}", {"a": [1], "b": [2, 3]}, "1,2,3"),
            ("{{ a|add(b) }}", {"a": "foo", "b": "bar"}, "foobar"),
            ("{{ a|add(b) }}", {"a": "n", "b": 1}, "n1"),
            ("{{ a|add(b)|length }}", {"a": {"x": 1}, "b": {"y": 2}}, "2"),
            ("{{ a|add }}", {"a": "foo"}, "foo"),
            ("{{ a|add }}", {"a": 5}, "5"),
        ],
    )
    def test_add(self, env_raw, source, ctx, expected):
        assert render(env_raw, source, ctx) == expected

    @pytest.mark.parametrize(
        ("ctx", "expected"),
        [
            ({}, "fallback"),
            ({"v": ""}, "fallback"),
            ({"v": None}, "fallback"),
            ({"v": False}, "fallback"),
            ({"v": 0}, "0"),
            ({"v": "set"}, "set"),
        ],
    )
    def test_default(self, env_raw, ctx, expected):
        assert render(env_raw, '{{ v|default("fallback") }}', ctx) == expected

    def test_json_encode(self, env_raw):
        data = {"name": "Ada", "tags": [1, 2], "ok": True, "none": None}
        assert render(env_raw, "{{ data|json_encode }}", data=data) == (
            '{"name":"Ada","tags":[1,2],"ok":true,"none":null}'
        )

    def test_json_encode_indent(self, env_raw):
        assert render(env_raw, "{{ data|json_encode(2) }}", data={"a": 1}) == '{\n  "a": 1\n}'

    def test_json_encode_escaped_when_autoescaping(self, env):
        assert render(env, "{{ data|json_encode }}", data={"a": "b"}) == (
            "{&quot;a&quot;:&quot;b&quot;}"
        )

    def test_json_encode_unknown_objects(self, env_raw):
        stamp = datetime(2020, 1, 2, tzinfo=timezone.utc)
        assert render(env_raw, "{{ d|json_encode }}", d=[stamp]) == (
            '["2020-01-02 00:00:00+00:00"]'
        )

    def test_url_encode(self, env_raw):
        assert render(env_raw, "{{ s|url_encode }}", s="a b&c=d/é") == "a%20b%26c%3Dd%2F%C3%A9"

    def test_url_encode_keeps_unreserved(self, env_raw):
        assert render(env_raw, "{{ s|url_encode }}", s="a-b_c.d!e~f*g'h(i)") == "a-b_c.d!e~f*g'h(i)"

    def test_url_decode(self, env_raw):
        assert render(env_raw, "{{ s|url_decode }}", s="a%20b%26c") == "a b&c"


class TestEscapeFilters:
    """``escape`` / ``e`` and ``raw``."""

    def test_escape_forced(self, env_raw):
        assert render(env_raw, "{{ s|escape }}", s="<b>") == "&lt;b&gt;"

    def test_e_alias(self, env_raw):
        assert render(env_raw, "{{ s|e }}", s="<b>") == "&lt;b&gt;"

    def test_js_escape(self, env):
        assert render(env, '{{ s|e("js") }}', s="a'b\n") == "a\\u0027b\\u000A"

    def test_raw(self, env):
        assert render(env, "{{ s|raw }}", s="<b>") == "<b>"

    def test_autoescape_applied_once(self, env):
        assert render(env, "{{ s|escape }}", s="<b>") == "&lt;b&gt;"

    def test_existing_entities_kept(self, env):
        assert render(env, "{{ s }}", s="&amp; & <") == "&amp; &amp; &lt;"

    def test_quotes(self, env):
        assert render(env, "{{ s }}", s="\"'") == "&quot;&#39;"

    def test_markup_not_escaped(self, env):
        assert render(env, "{{ s }}", s=Markup("<b>safe</b>")) == "<b>safe</b>"

    def test_explicit_escape_escapes_markup(self, env):
        assert render(env, "{{ s|escape }}", s=Markup("<b>")) == "&lt;b&gt;"

    def test_explicit_escape_escapes_macro_output(self, env):
        source = "{% macro m %}<b>{% endmacro %}{{ m()|escape }}"
        assert render(env, source) == "&lt;b&gt;"

    def test_raw_after_escape_keeps_markup(self, env):
        assert render(env, "{{ s|e|raw }}", s=Markup("<b>")) == "<b>"

    def test_escape_filter_in_set_escapes_markup(self, env_raw):
        source = "{% set safe = s|e %}{{ safe }}"
        assert render(env_raw, source, s=Markup("<i>")) == "&lt;i&gt;"

    def test_escape_in_set_value(self, env_raw):
        source = "{% set safe = s|escape %}{{ safe }}"
        assert render(env_raw, source, s="<i>") == "&lt;i&gt;"


class TestDispatch:
    """Filter registry lookups."""

    def test_all_builtins_registered(self):
        assert set(DEFAULT_FILTERS) == {
            "add",
            "addslashes",
            "capitalize",
            "date",
            "default",
            "e",
            "escape",
            "first",
            "join",
            "json_encode",
            "last",
            "length",
            "lower",
            "replace",
            "reverse",
            "striptags",
            "title",
            "uniq",
            "upper",
            "url_decode",
            "url_encode",
        }

    def test_unknown_filter_passes_value(self, env):
        assert render(env, "{{ name|nonexistent }}", name="Ada") == "Ada"

    def test_custom_filter(self):
        env = Environment(filters={"shout": lambda v: f"{v}!"})
        assert render(env, "{{ word|shout }}", word="hi") == "hi!"

    def test_custom_filter_with_args(self):
        env = Environment(filters={"wrap": lambda v, left, right: f"{left}{v}{right}"})
        assert render(env, '{{ word|wrap("[", "]") }}', word="hi") == "[hi]"

    def test_custom_filter_overrides_builtin(self):
        env = Environment(filters={"upper": lambda v: "custom"})
        assert render(env, "{{ word|upper }}", word="hi") == "custom"

    def test_registry_assignment(self, env):
        env.filters["double"] = lambda v: v * 2
        assert "double" in env.filters
        assert render(env, "{{ n|double }}", n=21) == "42"

    def test_registry_does_not_touch_defaults(self, env):
        env.filters["lower"] = lambda v: "changed"
        assert DEFAULT_FILTERS["lower"]("ABC") == "abc"

    def test_filter_block(self, env):
        assert render(env, "{% filter upper %}hi {{ name }}{% endfilter %}", name="ada") == "HI ADA"

    def test_filter_block_with_args(self, env):
        source = '{% filter replace "a" "o" "g" %}banana{% endfilter %}'
        assert render(env, source) == "bonono"

    def test_filter_block_unknown_filter(self, env):
        assert render(env, "{% filter nope %}text{% endfilter %}") == "text"
