"""Property-based tests for loops and collection filters.

- Loop metadata is consistent for every position of every list
- Empty iterables take the else branch and nothing else
- Collection filters agree with their Python counterparts
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from swiglet import Environment

from .strategies import filter_chain, loop_items

_env = Environment(autoescape=False)


def _render(template: str, **ctx: object) -> str:
    """Compile and render a one-shot template."""
    return _env.compile(template, cache=False).render(**ctx)


class TestLoopProperties:
    """Invariants of ``loop`` inside ``{% for %}``."""

    @given(items=loop_items)
    @settings(max_examples=100)
    def test_index_sequence(self, items: list) -> None:
        result = _render("{% for x in items %}{{ loop.index }},{% endfor %}", items=items)
        assert result == "".join(f"{i}," for i in range(1, len(items) + 1))

    @given(items=loop_items)
    @settings(max_examples=100)
    def test_index_plus_revindex(self, items: list) -> None:
        """index + revindex0 == length at every position."""
        source = (
            "{% for x in items %}{{ loop.index }}:{{ loop.revindex0 }}:{{ loop.length }};"
            "{% endfor %}"
        )
        for part in filter(None, _render(source, items=items).split(";")):
            index, revindex0, length = (int(n) for n in part.split(":"))
            assert index + revindex0 == length == len(items)

    @given(items=loop_items)
    @settings(max_examples=100)
    def test_first_and_last_once(self, items: list) -> None:
        source = (
            "{% for x in items %}{% if loop.first %}F{% endif %}"
            "{% if loop.last %}L{% endif %}{% endfor %}"
        )
        assert _render(source, items=items) == ("FL" if items else "")

    @given(items=loop_items)
    @settings(max_examples=100)
    def test_else_only_when_empty(self, items: list) -> None:
        source = "{% for x in items %}.{% else %}empty{% endfor %}"
        assert _render(source, items=items) == ("." * len(items) if items else "empty")

    @given(items=loop_items, outer=st.text(alphabet="pqr", min_size=1, max_size=4))
    @settings(max_examples=100)
    def test_loop_variable_restored(self, items: list, outer: str) -> None:
        assert _render("{% for x in items %}{% endfor %}{{ x }}", items=items, x=outer) == outer

    @given(data=st.dictionaries(st.text(alphabet="abc", min_size=1, max_size=3), st.integers(0, 9)))
    @settings(max_examples=100)
    def test_mapping_keys_in_order(self, data: dict) -> None:
        source = "{% for v in data %}{{ loop.key }}={{ v }};{% endfor %}"
        assert _render(source, data=data) == "".join(f"{k}={v};" for k, v in data.items())


class TestCollectionFilterProperties:
    """Collection filters agree with Python."""

    @given(items=loop_items)
    @settings(max_examples=100)
    def test_length(self, items: list) -> None:
        assert _render("{{ items|length }}", items=items) == str(len(items))

    @given(items=loop_items)
    @settings(max_examples=100)
    def test_join(self, items: list) -> None:
        assert _render('{{ items|join("|") }}', items=items) == "|".join(str(i) for i in items)

    @given(items=loop_items)
    @settings(max_examples=100)
    def test_reverse_twice(self, items: list) -> None:
        once = _render('{{ items|join("|") }}', items=items)
        assert _render('{{ items|reverse|reverse|join("|") }}', items=items) == once

    @given(items=loop_items)
    @settings(max_examples=100)
    def test_uniq_keeps_first_occurrences(self, items: list) -> None:
        expected = "|".join(str(i) for i in dict.fromkeys(items))
        assert _render('{{ items|uniq|join("|") }}', items=items) == expected

    @given(s=st.text(max_size=60), chain=filter_chain)
    @settings(max_examples=100)
    def test_chain_matches_sequential(self, s: str, chain: list[str]) -> None:
        """A chained filter equals applying each filter in its own template."""
        expected = s
        for name in chain:
            expected = _render(f"{{{{ v|{name} }}}}", v=expected)
        assert _render("{{ v|" + "|".join(chain) + " }}", v=s) == expected

    @given(s=st.text(max_size=60))
    @settings(max_examples=100)
    def test_url_encode_reversible(self, s: str) -> None:
        assert _render("{{ s|url_encode|url_decode }}", s=s) == s
