"""Mandira: a logic-light template engine with filters and conditionals.

Mustache-style tags, plus filter chains and boolean conditions:

    {{ name }}                      escaped output
    {{{ body }}}                    raw output
    {{! comment }}
    {{#items}}{{.index1}}. {{title}}{{/items}}
    {{ name|index(0)|upper }}
    {{?if admin or count > 10}}...{{?else}}...{{/if}}

Quickstart:
    >>> import mandira
    >>> mandira.render("Hello, {{ name }}!", {"name": "World"})
    'Hello, World!'

    >>> from mandira import Environment, FileSystemLoader
    >>> env = Environment(loader=FileSystemLoader("templates/"))
    >>> env.get_template("index.mnd").render(page, site)

Architecture:
Template Source → Parser (Lexer + expression parser per tag) → node tree
→ Renderer walking the tree against a context chain

Rendering is forgiving: a missing name, a missing filter or a failing
filter renders as empty text. Only structural errors in the template raise
(`ParseError`, `TemplateSyntaxError`), and they raise at parse time.

Thread-Safety:
Parsed templates are immutable and may be rendered from many threads at
once. The filter registry is copy-on-write.

"""

from collections.abc import Callable
from os import PathLike
from typing import Any

# The environment package must be imported before the lexer/parser modules
from mandira.environment import (
    DEFAULT_SUFFIXES,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FilterRegistry,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
    get_default_environment,
    is_template,
)
from mandira._types import Token, TokenType
from mandira.context import ContextChain, Frame
from mandira.lexer import tokenize
from mandira.parser import ParseError, Parser
from mandira.render import Renderer
from mandira.template import Template
from mandira.utils.html import html_escape
from mandira.values import MISSING, ValueKind, kind_of

__version__ = "0.1.0"


def parse(source: str, name: str | None = None) -> Template:
    """Parse template source with the default environment."""
    return get_default_environment().from_string(source, name=name)


def parse_file(path: str | PathLike[str]) -> Template:
    """Read and parse a template file with the default environment."""
    return get_default_environment().from_file(path)


def render(source: str, *contexts: Any, **kwargs: Any) -> str:
    """Parse and render ``source``.

    Example:
        >>> render("{{#users}}{{.index1}}:{{name}} {{/users}}",
        ...        users=[{"name": "ann"}, {"name": "bob"}])
        '1:ann 2:bob '
    """
    return get_default_environment().render(source, *contexts, **kwargs)


def render_file(path: str | PathLike[str], *contexts: Any, **kwargs: Any) -> str:
    return get_default_environment().render_file(path, *contexts, **kwargs)


def render_in_layout(source: str, layout_source: str, *contexts: Any, **kwargs: Any) -> str:
    """Render ``source``, then render the layout with it bound to ``content``."""
    return get_default_environment().render_in_layout(source, layout_source, *contexts, **kwargs)


def render_file_in_layout(
    path: str | PathLike[str],
    layout_path: str | PathLike[str],
    *contexts: Any,
    **kwargs: Any,
) -> str:
    return get_default_environment().render_file_in_layout(path, layout_path, *contexts, **kwargs)


def add_filter(name: str, func: Callable[..., Any]) -> None:
    """Register a filter on the default environment."""
    get_default_environment().add_filter(name, func)


def get_filter(name: str) -> Callable[..., Any] | None:
    return get_default_environment().get_filter(name)


__all__ = [
    "DEFAULT_SUFFIXES",
    "MISSING",
    "ContextChain",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FilterRegistry",
    "Frame",
    "ParseError",
    "Parser",
    "Renderer",
    "SourceSnippet",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "ValueKind",
    "__version__",
    "add_filter",
    "build_source_snippet",
    "get_default_environment",
    "get_filter",
    "html_escape",
    "is_template",
    "kind_of",
    "parse",
    "parse_file",
    "render",
    "render_file",
    "render_file_in_layout",
    "render_in_layout",
    "tokenize",
]
