"""Swiglet: swig-style templates compiled to Python.

Templates use ``{{ value|filter }}`` interpolation, ``{% tag %}`` logic and
``{# comments #}``, with block inheritance, macros, includes and imports.

Quickstart:
    >>> import swiglet
    >>> swiglet.compile("Hello, {{ name }}!").render(name="World")
    'Hello, World!'

Isolated configuration:
    >>> from swiglet import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({"page.html": "<h1>{{ title }}</h1>"}))
    >>> env.compile_file("page.html").render(title="<Home>")
    '<h1>&lt;Home&gt;</h1>'

Architecture:
Template Source → Lexer → Parser → token tree → inheritance resolution →
Compiler → Python AST → exec()

Pipeline stages:
1. **Lexer**: Splits source into literal, variable, logic and comment segments
2. **Parser**: Builds the token tree, pairing ``{% name %}`` with ``{% endname %}``
3. **Resolver**: Applies ``extends``/``block``/``parent`` before compilation
4. **Compiler**: Generates an ``ast.Module`` defining ``render(ctx, _parents)``
5. **Template**: Wraps the compiled code with the ``render()`` interface

Undefined values render as empty strings; render errors become inline
``<pre>`` markers unless the environment sets ``allow_errors=True``.

"""

from swiglet.environment import (
    ChoiceLoader,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FunctionLoader,
    LexerError,
    SourceSnippet,
    TagSpec,
    TemplateError,
    TemplateNotFoundError,
    TemplateResolutionError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from swiglet.engine import compile, compile_file, get_environment, init, render_file
from swiglet.render_context import RenderContext, get_render_context, render_context
from swiglet.template import UNDEFINED, ErrorTemplate, LoopContext, Markup, Template
from swiglet.utils.html import html_escape

__version__ = "0.1.0"

__all__ = [
    "UNDEFINED",
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "ErrorTemplate",
    "FileSystemLoader",
    "FunctionLoader",
    "LexerError",
    "LoopContext",
    "Markup",
    "RenderContext",
    "SourceSnippet",
    "TagSpec",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateResolutionError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "__version__",
    "build_source_snippet",
    "compile",
    "compile_file",
    "get_environment",
    "get_render_context",
    "html_escape",
    "init",
    "render_context",
    "render_file",
]
