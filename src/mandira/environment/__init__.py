"""Mandira environment: configuration, loaders, filters and errors.

Exceptions and terminal helpers are imported first: the parser and the
template modules depend on them while this package is still initialising.
"""

from mandira.environment.exceptions import (
    ErrorCode,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from mandira.environment.registry import FilterRegistry
from mandira.environment.loaders import (
    DEFAULT_SUFFIXES,
    DictLoader,
    FileSystemLoader,
    is_template,
)
from mandira.environment.core import Environment, get_default_environment

__all__ = [
    "DEFAULT_SUFFIXES",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FilterRegistry",
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "build_source_snippet",
    "get_default_environment",
    "is_template",
]
