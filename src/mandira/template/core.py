"""Mandira Template: parsed template object ready for rendering.

The Template class wraps an immutable node tree and provides the
``render()`` API. Templates are immutable and thread-safe for concurrent
rendering.

Architecture:
    ```
    Template
    ├── _env: Environment      # Filters and autoescape setting
    ├── _ast: nodes.Template   # Parsed node tree
    └── _name, _filename       # For error messages
    ```

Context Chain:
Positional arguments to ``render()`` become the context chain, first
argument innermost. Keyword arguments form one extra frame in front of them:
    ```python
    t.render(user, site)           # user shadows site
    t.render(site, title="Home")   # title shadows site
    ```

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mandira.context import ContextChain
from mandira.environment.exceptions import TemplateError, TemplateRuntimeError

if TYPE_CHECKING:
    from mandira.environment import Environment
    from mandira.nodes import Template as TemplateNode


class Template:
    """Parsed template ready for rendering.

    Thread-Safety:
        - Template object is immutable after construction
        - Each ``render()`` call creates local state only (buf list)
        - Multiple threads can render the same template simultaneously

    Attributes:
        name: Template identifier (for error messages)
        filename: Source file path (for error messages)
        source: Template source text
        ast: Root node of the parsed tree

    Example:
            >>> from mandira import Environment
            >>> env = Environment()
            >>> t = env.from_string("Hello, {{ name|upper }}!")
            >>> t.render(name="World")
            'Hello, WORLD!'

            >>> t.render({"name": "World"})
            'Hello, WORLD!'

    """

    __slots__ = ("_ast", "_env", "_filename", "_name", "_source")

    def __init__(
        self,
        env: Environment,
        ast: TemplateNode,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ):
        self._env = env
        self._ast = ast
        self._name = name
        self._filename = filename
        self._source = source

    @property
    def environment(self) -> Environment:
        return self._env

    @property
    def name(self) -> str | None:
        """Template name."""
        return self._name

    @property
    def filename(self) -> str | None:
        """Source filename."""
        return self._filename

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def ast(self) -> TemplateNode:
        return self._ast

    def render(self, *contexts: Any, **kwargs: Any) -> str:
        """Render the template against one or more context values.

        Args:
            *contexts: Context values, innermost first. Any value works:
                dicts, dataclasses, named tuples, plain objects, lists.
            **kwargs: Context variables as keyword arguments

        Returns:
            Rendered template as string

        Raises:
            TemplateRuntimeError: On an unexpected internal failure. Missing
                names and failing filters never raise.
        """
        return self.render_chain(self._chain(contexts, kwargs))

    def render_in_layout(self, layout: Template, *contexts: Any, **kwargs: Any) -> str:
        """Render this template, then ``layout`` with the result as ``content``.

        The layout sees ``{"content": <rendered>}`` as its innermost frame,
        followed by the same contexts this template was rendered with.
        ``content`` is plain text, so write ``{{{content}}}`` in the layout to
        avoid escaping it a second time.
        """
        chain = self._chain(contexts, kwargs)
        content = self.render_chain(chain)
        return layout.render_chain(chain.push({"content": content}))

    def render_chain(self, chain: ContextChain) -> str:
        """Render against a prepared context chain."""
        try:
            return self._env.renderer.render(self._ast, chain)
        except TemplateError:
            raise
        except RecursionError as e:
            raise TemplateRuntimeError(
                "maximum recursion depth exceeded while rendering",
                template_name=self._filename or self._name,
                suggestion="Reduce section nesting or the depth of the context data",
            ) from e
        except Exception as e:
            raise TemplateRuntimeError(
                str(e) or type(e).__name__,
                template_name=self._filename or self._name,
            ) from e

    @staticmethod
    def _chain(contexts: tuple[Any, ...], kwargs: dict[str, Any]) -> ContextChain:
        if kwargs:
            return ContextChain.from_values(kwargs, *contexts)
        return ContextChain.from_values(*contexts)

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"
