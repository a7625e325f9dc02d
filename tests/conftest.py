"""Pytest configuration and fixtures for swiglet tests."""

import pytest

from swiglet import DictLoader, Environment


@pytest.fixture
def env():
    """Create a basic swiglet Environment."""
    return Environment()


@pytest.fixture
def env_raw():
    """Create a swiglet Environment with autoescape disabled."""
    return Environment(autoescape=False)


@pytest.fixture
def env_strict():
    """Create a swiglet Environment that lets render errors propagate."""
    return Environment(allow_errors=True)


@pytest.fixture
def env_with_loader():
    """Create a swiglet Environment with DictLoader and test templates."""
    loader = DictLoader(
        {
            "base.html": (
                "<html>"
                "<head>{% block head %}<title>Site</title>{% endblock %}</head>"
                "<body>{% block body %}{% endblock %}</body>"
                "</html>"
            ),
            "child.html": '{% extends "base.html" %}{% block body %}Hello World{% endblock %}',
            "partial.html": "<p>{{ title }}</p>",
            "macros.html": (
                "{% macro greet(name) %}Hello {{ name }}{% endmacro %}"
                "{% macro link(href, text) %}<a href=\"{{ href }}\">{{ text }}</a>{% endmacro %}"
            ),
            "self.html": '{% include "self.html" %}',
            "ping.html": 'ping {% include "pong.html" %}',
            "pong.html": 'pong {% include "ping.html" %}',
        }
    )
    return Environment(loader=loader, allow_errors=True)


def render(env: Environment, source: str, context: dict | None = None, **kwargs) -> str:
    """Compile ``source`` uncached and render it."""
    return env.compile(source, cache=False).render(context, **kwargs)
