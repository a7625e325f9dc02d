"""Test template inheritance: extends, block and parent."""

import pytest

from swiglet import (
    DictLoader,
    Environment,
    TemplateResolutionError,
    TemplateSyntaxError,
)


@pytest.fixture
def layouts():
    """Environment with a three-level layout chain."""
    loader = DictLoader(
        {
            "base.html": (
                "<title>{% block title %}Site{% endblock %}</title>"
                "<main>{% block content %}{% endblock %}</main>"
                "{{ footer }}"
            ),
            "section.html": (
                '{% extends "base.html" %}'
                "{% block title %}Section | {% parent %}{% endblock %}"
            ),
            "page.html": (
                '{% extends "section.html" %}'
                "{% block title %}Page | {% parent %}{% endblock %}"
                "{% block content %}Body{% endblock %}"
            ),
            "alt.html": "<alt>{% block content %}{% endblock %}</alt>",
            "loop_a.html": '{% extends "loop_b.html" %}',
            "loop_b.html": '{% extends "loop_a.html" %}',
            "self.html": '{% extends "self.html" %}',
        }
    )
    return Environment(loader=loader, allow_errors=True)


class TestBlocks:
    """Overriding and extending blocks."""

    def test_override(self, env_with_loader):
        result = env_with_loader.compile_file("child.html").render()
        assert result == (
            "<html><head><title>Site</title></head><body>Hello World</body></html>"
        )

    def test_parent_default_kept(self, layouts):
        tmpl = layouts.from_string('{% extends "base.html" %}')
        assert tmpl.render() == "<title>Site</title><main></main>"

    def test_parent_tag(self, env_with_loader):
        tmpl = env_with_loader.from_string(
            '{% extends "base.html" %}{% block head %}{% parent %}<meta>{% endblock %}'
        )
        assert tmpl.render() == (
            "<html><head><title>Site</title><meta></head><body></body></html>"
        )

    def test_multi_level(self, layouts):
        result = layouts.compile_file("page.html").render()
        assert result == "<title>Page | Section | Site</title><main>Body</main>"

    def test_parent_of_unchanged_block(self, layouts):
        tmpl = layouts.from_string(
            '{% extends "section.html" %}{% block content %}[{% parent %}]{% endblock %}'
        )
        assert tmpl.render() == "<title>Section | Site</title><main>[]</main>"

    def test_parent_without_parent_block(self, layouts):
        tmpl = layouts.from_string("{% block content %}a{% parent %}b{% endblock %}")
        assert tmpl.render() == "ab"

    def test_block_without_extends_renders(self, env):
        assert env.compile("<{% block x %}body{% endblock %}>").render() == "<body>"

    def test_content_outside_blocks_discarded(self, layouts):
        tmpl = layouts.from_string(
            '{% extends "base.html" %}ignored{% block content %}kept{% endblock %}ignored'
        )
        assert tmpl.render() == "<title>Site</title><main>kept</main>"

    def test_top_level_set_hoisted(self, layouts):
        tmpl = layouts.from_string('{% extends "base.html" %}{% set footer = "F" %}')
        assert tmpl.render() == "<title>Site</title><main></main>F"

    def test_blocks_see_context(self, layouts):
        tmpl = layouts.from_string(
            '{% extends "base.html" %}{% block content %}{{ name }}{% endblock %}'
        )
        assert tmpl.render(name="Ada") == "<title>Site</title><main>Ada</main>"

    def test_whitespace_before_extends(self, layouts):
        tmpl = layouts.from_string(
            '\n  {% extends "base.html" %}\n{% block content %}x{% endblock %}\n'
        )
        assert tmpl.render() == "<title>Site</title><main>x</main>"

    def test_strip_markers_in_block(self, layouts):
        tmpl = layouts.from_string(
            '{% extends "base.html" %}{% block content -%}  x  {%- endblock %}'
        )
        assert tmpl.render() == "<title>Site</title><main>x</main>"

    def test_effective_blocks(self, layouts):
        tmpl = layouts.compile_file("page.html")
        assert set(tmpl.blocks) == {"title", "content"}
        assert tmpl.parent.name == "section.html"
        assert tmpl.parent.parent.name == "base.html"
        assert not tmpl.deferred


class TestDeferredExtends:
    """``{% extends layout %}`` naming a context variable."""

    def test_resolved_at_render(self, layouts):
        tmpl = layouts.from_string("{% extends layout %}{% block content %}X{% endblock %}")
        assert tmpl.deferred
        assert tmpl.render(layout="base.html") == "<title>Site</title><main>X</main>"
        assert tmpl.render(layout="alt.html") == "<alt>X</alt>"

    def test_repeated_render_reuses_variant(self, layouts):
        tmpl = layouts.from_string("{% extends layout %}{% block content %}X{% endblock %}")
        first = tmpl.render(layout="alt.html")
        assert tmpl.render(layout="alt.html") == first

    def test_dotted_variable(self, layouts):
        tmpl = layouts.from_string("{% extends theme.layout %}{% block content %}Y{% endblock %}")
        assert tmpl.render(theme={"layout": "alt.html"}) == "<alt>Y</alt>"

    def test_non_string_variable(self, layouts):
        tmpl = layouts.from_string("{% extends layout %}")
        with pytest.raises(TemplateResolutionError, match="exactly one string literal"):
            tmpl.render(layout=42)


class TestInheritanceErrors:
    """Structural errors are raised at compile time."""

    def test_circular(self, layouts):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            layouts.compile_file("loop_a.html")
        assert exc_info.value.message == 'Circular extends found on line 1 of "loop_b.html"!'

    def test_self_extends(self, layouts):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            layouts.compile_file("self.html")
        assert exc_info.value.message == 'Circular extends found on line 1 of "self.html"!'

    @pytest.mark.parametrize(
        "source",
        [
            'text{% extends "base.html" %}',
            '{{ x }}{% extends "base.html" %}',
            '{% extends "base.html" %}{% extends "alt.html" %}',
            '{% if x %}{% extends "base.html" %}{% endif %}',
        ],
    )
    def test_misplaced_extends(self, layouts, source):
        with pytest.raises(TemplateResolutionError) as exc_info:
            layouts.compile(source)
        assert exc_info.value.message == (
            'Extends tag must be the first tag in the template, but "extends" found on line 1.'
        )

    def test_nested_block(self, env):
        with pytest.raises(TemplateResolutionError) as exc_info:
            env.compile("{% block a %}{% block b %}{% endblock %}{% endblock %}")
        assert exc_info.value.message == 'Block "b" found nested in another block tag on line 1.'

    def test_block_inside_if(self, env):
        with pytest.raises(TemplateResolutionError, match="found nested"):
            env.compile("{% if x %}\n{% block b %}{% endblock %}{% endif %}")

    @pytest.mark.parametrize(
        ("source", "name"),
        [
            ("{% block 2col %}{% endblock %}", "2col"),
            ("{% block _x %}{% endblock %}", "_x"),
            ("{% block %}{% endblock %}", ""),
        ],
    )
    def test_invalid_block_name(self, env, source, name):
        with pytest.raises(TemplateResolutionError) as exc_info:
            env.compile(source)
        assert exc_info.value.message == f'Invalid block tag name "{name}" on line 1.'

    def test_extends_arguments(self, layouts):
        with pytest.raises(TemplateResolutionError) as exc_info:
            layouts.compile('{% extends "base.html" "alt.html" %}')
        assert exc_info.value.message == (
            "Extends tag on line 1 accepts exactly one string literal as an argument."
        )

    def test_missing_parent(self, layouts):
        from swiglet import TemplateNotFoundError

        with pytest.raises(TemplateNotFoundError):
            layouts.compile('{% extends "nope.html" %}')
