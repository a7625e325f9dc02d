"""Test the module-level default environment."""

import pytest

import swiglet
from swiglet import DictLoader


@pytest.fixture(autouse=True)
def reset_default():
    """Restore a fresh default environment after each test."""
    yield
    swiglet.init()


class TestInit:
    def test_returns_new_default(self):
        env = swiglet.init(autoescape=False)
        assert swiglet.get_environment() is env
        assert swiglet.compile("{{ s }}").render(s="<b>") == "<b>"

    def test_clears_previous_cache(self):
        old = swiglet.get_environment()
        first = old.compile("{{ x }}")
        swiglet.init()
        assert old.compile("{{ x }}") is not first

    def test_previous_configuration_dropped(self):
        swiglet.init(filters={"shout": lambda v: f"{v}!"})
        swiglet.init()
        assert swiglet.compile("{{ w|shout }}", cache=False).render(w="hi") == "hi"

    def test_user_filters_merged_with_builtins(self):
        swiglet.init(filters={"shout": lambda v: f"{v}!"})
        assert swiglet.compile("{{ w|shout|upper }}").render(w="hi") == "HI!"

    @pytest.mark.parametrize(
        ("alias", "attribute", "value"),
        [("tzOffset", "tz_offset", -60), ("allowErrors", "allow_errors", True)],
    )
    def test_camel_case_aliases(self, alias, attribute, value):
        with pytest.warns(DeprecationWarning, match=f"'{alias}' is deprecated"):
            env = swiglet.init(**{alias: value})
        assert getattr(env, attribute) == value

    def test_unknown_option(self):
        with pytest.warns(UserWarning, match="Ignoring unknown option 'bogus'"):
            env = swiglet.init(bogus=1, autoescape=False)
        assert env.autoescape is False


class TestShortcuts:
    def test_compile(self):
        assert swiglet.compile("Hello, {{ name }}!").render(name="World") == "Hello, World!"

    def test_compile_file_and_render_file(self):
        swiglet.init(loader=DictLoader({"hi.html": "Hi {{ name }}"}))
        assert swiglet.compile_file("hi.html").render(name="Ada") == "Hi Ada"
        assert swiglet.render_file("hi.html", {"name": "Bob"}) == "Hi Bob"
        assert swiglet.render_file("hi.html", name="Cy") == "Hi Cy"

    def test_render_file_from_root(self, tmp_path):
        (tmp_path / "page.html").write_text("<h1>{{ title }}</h1>")
        swiglet.init(root=str(tmp_path))
        assert swiglet.render_file("page.html", title="Home") == "<h1>Home</h1>"

    def test_tz_offset_reaches_date_filter(self):
        swiglet.init(tz_offset=-120)
        assert swiglet.compile('{{ d|date("H") }}').render(d=0) == "02"
