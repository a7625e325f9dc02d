"""Swiglet environment: configuration, registries, loaders and errors."""

from swiglet.environment.core import Environment
from swiglet.environment.exceptions import (
    ErrorCode,
    LexerError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateResolutionError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from swiglet.environment.filters import DEFAULT_FILTERS
from swiglet.environment.loaders import (
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    Loader,
)
from swiglet.environment.tags import DEFAULT_TAGS, TagSpec

__all__ = [
    "DEFAULT_FILTERS",
    "DEFAULT_TAGS",
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FunctionLoader",
    "LexerError",
    "Loader",
    "SourceSnippet",
    "TagSpec",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateResolutionError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "build_source_snippet",
]
