"""Mandira Environment: configuration holder for templates.

An Environment owns the filter registry, the autoescape setting and an
optional loader. Every template it creates renders with its filters.

Example:
    >>> env = Environment()
    >>> env.add_filter("shout", lambda s: s.upper() + "!")
    >>> env.from_string("{{ msg|shout }}").render(msg="hi")
    'HI!'

Thread-Safety:
    Filters may be added while other threads render; the registry is
    copy-on-write. Templates themselves are immutable.

"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar

from mandira.environment.exceptions import TemplateNotFoundError
from mandira.environment.loaders import DictLoader, FileSystemLoader
from mandira.environment.registry import FilterRegistry
from mandira.filters import DEFAULT_FILTERS
from mandira.parser import Parser
from mandira.render import Renderer
from mandira.template import Template

F = TypeVar("F", bound=Callable[..., Any])

Loader = FileSystemLoader | DictLoader


class Environment:
    """Central configuration for Mandira templates.

    Args:
        loader: Optional loader for `get_template()`. The loader is bound to
            this environment so the templates it parses use these filters.
        autoescape: HTML-escape ``{{ }}`` output (``{{{ }}}`` is always raw)
        filters: Extra filters to register on top of the built-ins
        default_filters: Register the built-in filters

    Attributes:
        filters: The `FilterRegistry` used by every template of this
            environment
        renderer: The shared `Renderer`

    """

    __slots__ = ("autoescape", "filters", "loader", "renderer")

    def __init__(
        self,
        loader: Loader | None = None,
        *,
        autoescape: bool = True,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        default_filters: bool = True,
    ):
        self.autoescape = autoescape
        self.filters = FilterRegistry(DEFAULT_FILTERS if default_filters else None)
        if filters:
            self.filters.update(filters)
        self.renderer = Renderer(self.filters, autoescape=autoescape)
        self.loader = loader
        if loader is not None:
            loader.bind(self)

    # Parsing

    def parse(self, source: str, name: str | None = None, filename: str | None = None) -> Template:
        """Parse ``source`` into a Template.

        Raises:
            ParseError: On any structural or expression error
            TemplateSyntaxError: If tag content cannot be tokenized
        """
        ast = Parser(source, name=name, filename=filename).parse()
        return Template(self, ast, name=name, filename=filename, source=source)

    def from_string(
        self, source: str, name: str | None = None, filename: str | None = None
    ) -> Template:
        """Parse a template from source text."""
        return self.parse(source, name=name, filename=filename)

    def from_file(self, path: str | os.PathLike[str], encoding: str = "utf-8") -> Template:
        """Read and parse a template file.

        Raises:
            TemplateNotFoundError: If the file does not exist
        """
        file = Path(path)
        try:
            source = file.read_text(encoding)
        except FileNotFoundError:
            raise TemplateNotFoundError(f"Template '{file}' not found") from None
        return self.parse(source, name=file.name, filename=str(file))

    def get_template(self, name: str) -> Template:
        """Load a template by name through the configured loader.

        Raises:
            TemplateNotFoundError: If there is no loader or it lacks ``name``
        """
        if self.loader is None:
            raise TemplateNotFoundError(
                f"Template '{name}' not found: no loader configured for this environment"
            )
        return self.loader.get(name)

    # Filters

    def add_filter(self, name: str, func: Callable[..., Any]) -> None:
        """Register a filter under ``name``."""
        self.filters.register(name, func)

    def get_filter(self, name: str) -> Callable[..., Any] | None:
        return self.filters.get(name)

    def filter(self, name: str | None = None) -> Callable[[F], F]:
        """Decorator registering a filter.

        Without a name, the function's name lower-cased is used.

        Example:
            >>> @env.filter()
            ... def Reverse(value: str) -> str:
            ...     return value[::-1]
            >>> env.from_string("{{ w|reverse }}").render(w="abc")
            'cba'
        """

        def decorator(func: F) -> F:
            self.add_filter(name or func.__name__.lower(), func)
            return func

        return decorator

    # Rendering shortcuts

    def render(self, source: str, *contexts: Any, **kwargs: Any) -> str:
        """Parse ``source`` and render it."""
        return self.from_string(source).render(*contexts, **kwargs)

    def render_file(self, path: str | os.PathLike[str], *contexts: Any, **kwargs: Any) -> str:
        return self.from_file(path).render(*contexts, **kwargs)

    def render_in_layout(
        self, source: str, layout_source: str, *contexts: Any, **kwargs: Any
    ) -> str:
        """Render ``source``, then ``layout_source`` with the result as ``content``."""
        layout = self.from_string(layout_source, name="<layout>")
        template = self.from_string(source)
        return template.render_in_layout(layout, *contexts, **kwargs)

    def render_file_in_layout(
        self,
        path: str | os.PathLike[str],
        layout_path: str | os.PathLike[str],
        *contexts: Any,
        **kwargs: Any,
    ) -> str:
        layout = self.from_file(layout_path)
        template = self.from_file(path)
        return template.render_in_layout(layout, *contexts, **kwargs)

    def __repr__(self) -> str:
        return f"<Environment loader={self.loader!r} autoescape={self.autoescape}>"


_default_environment: Environment | None = None
_default_lock = threading.Lock()


def get_default_environment() -> Environment:
    """Process-wide environment behind the module-level API.

    Created on first use with the built-in filters.
    """
    global _default_environment
    if _default_environment is None:
        with _default_lock:
            if _default_environment is None:
                _default_environment = Environment()
    return _default_environment
