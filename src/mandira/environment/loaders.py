"""Template loaders for Mandira environment.

Loaders map logical template names to parsed `Template` objects. They
implement `get(name)` and `list_templates()`.

Built-in Loaders:
- `FileSystemLoader`: Load from a directory tree, optionally preloading
  every template file into an in-memory cache
- `DictLoader`: Load from an in-memory dictionary (testing/embedded)

Template files are recognised by suffix (``.mnd``, ``.mandira``, ``.mda``
by default); see `is_template`.

Templates are parsed with the loader's environment, so they use its filters.
`Environment(loader=...)` binds the loader to itself. An unbound loader
parses with the default environment.

Thread-Safety:
Loaders are safe for concurrent `get()` calls. Caches are rebuilt off to
the side and swapped in whole, so a reader sees either the old cache or the
new one, never a partial one.

"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable, Mapping
from difflib import get_close_matches
from pathlib import Path
from typing import TYPE_CHECKING

from mandira.environment.exceptions import TemplateNotFoundError

if TYPE_CHECKING:
    from mandira.environment.core import Environment
    from mandira.template import Template

logger = logging.getLogger(__name__)

DEFAULT_SUFFIXES: tuple[str, ...] = (".mnd", ".mandira", ".mda")


def is_template(path: str | os.PathLike[str], suffixes: Iterable[str] = DEFAULT_SUFFIXES) -> bool:
    """True if ``path`` ends with one of the template ``suffixes``.

    Example:
        >>> is_template("pages/index.mnd")
        True
        >>> is_template("static/site.css")
        False
    """
    return os.fspath(path).endswith(tuple(suffixes))


def _not_found(name: str, available: list[str], where: str) -> TemplateNotFoundError:
    msg = f"Template '{name}' not found in: {where}"
    matches = get_close_matches(name, available, n=1, cutoff=0.6)
    if matches:
        msg += f". Did you mean '{matches[0]}'?"
    return TemplateNotFoundError(msg)


class _BaseLoader:
    """Environment binding shared by the built-in loaders."""

    __slots__ = ("_environment",)

    def __init__(self, environment: Environment | None = None):
        self._environment = environment

    @property
    def environment(self) -> Environment:
        if self._environment is None:
            from mandira.environment.core import get_default_environment

            return get_default_environment()
        return self._environment

    def bind(self, environment: Environment) -> None:
        """Parse all further templates with ``environment``."""
        self._environment = environment

    def _parse(self, source: str, name: str, filename: str | None) -> Template:
        return self.environment.from_string(source, name=name, filename=filename)


class FileSystemLoader(_BaseLoader):
    """Load templates from a directory tree.

    Template names are ``/``-separated paths relative to the root directory.

    Attributes:
        path: Root directory
        preload: Parse every template file up front and serve from the cache
        suffixes: File suffixes that mark a template file
        loaded: True once the directory has been walked

    Loading Modes:
        Without preload, every `get()` reads and parses ``root/name``:
            ```python
            loader = FileSystemLoader("templates/")
            loader.get("pages/about.mnd")   # reads templates/pages/about.mnd
            ```
        Names that resolve outside the root, such as ``../x.mnd``, are not
        found.

        With preload, the tree is walked once and only cached templates are
        served. Call `refresh()` to pick up changes on disk:
            ```python
            loader = FileSystemLoader("templates/", preload=True)
            loader.get("pages/about.mnd")   # from the cache
            ```

    Templates registered with `add()` are served in either mode.

    Raises:
        TemplateNotFoundError: If the template does not exist or lies outside
            the root
        ParseError: If a template file fails to parse

    """

    __slots__ = ("_cache", "_encoding", "_lock", "loaded", "path", "preload", "suffixes")

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        preload: bool = False,
        suffixes: Iterable[str] = DEFAULT_SUFFIXES,
        encoding: str = "utf-8",
        environment: Environment | None = None,
    ):
        super().__init__(environment)
        self.path = Path(path)
        self.preload = preload
        self.suffixes = tuple(suffixes)
        self.loaded = False
        self._encoding = encoding
        self._cache: dict[str, Template] = {}
        self._lock = threading.Lock()
        if preload:
            self.refresh()

    @property
    def cache(self) -> dict[str, Template]:
        """Copy of the name → Template cache."""
        return dict(self._cache)

    def bind(self, environment: Environment) -> None:
        super().bind(environment)
        if self.loaded:
            # Preloaded templates were parsed with the previous environment
            self.refresh()

    def _template_files(self) -> list[tuple[str, Path]]:
        found = []
        for path in sorted(self.path.rglob("*")):
            if path.is_file() and is_template(path.name, self.suffixes):
                found.append((path.relative_to(self.path).as_posix(), path))
        return found

    def refresh(self) -> None:
        """Walk the root directory and (re)parse every template file.

        Templates registered with `add()` stay in the cache unless a file
        of the same name replaces them.
        """
        with self._lock:
            cache = dict(self._cache)
            files = self._template_files()
            for name, path in files:
                cache[name] = self._parse(path.read_text(self._encoding), name, str(path))
            self._cache = cache
            self.loaded = True
        logger.info("Loaded %d template(s) from %s", len(files), self.path)

    def get(self, name: str) -> Template:
        """Return the template called ``name``."""
        if self.preload and not self.loaded:
            self.refresh()

        template = self._cache.get(name)
        if template is not None:
            return template

        if self.preload:
            raise _not_found(name, sorted(self._cache), str(self.path))

        path = self.path / name
        if not path.resolve().is_relative_to(self.path.resolve()):
            raise TemplateNotFoundError(
                f"Template '{name}' is outside the loader root: {self.path}"
            )
        if not path.is_file():
            raise TemplateNotFoundError(f"Template '{name}' not found in: {self.path}")
        logger.debug("Parsing template %s", path)
        return self._parse(path.read_text(self._encoding), name, str(path))

    def add(self, name: str, template: Template) -> None:
        """Register a template obtained elsewhere under ``name``."""
        with self._lock:
            cache = dict(self._cache)
            cache[name] = template
            self._cache = cache

    def list_templates(self) -> list[str]:
        """List template names: cached ones, plus files on disk without preload."""
        names = set(self._cache)
        if not self.preload and self.path.is_dir():
            names.update(name for name, _ in self._template_files())
        return sorted(names)

    def __repr__(self) -> str:
        return f"<FileSystemLoader {str(self.path)!r} preload={self.preload}>"


class DictLoader(_BaseLoader):
    """Load templates from an in-memory dictionary.

    Maps template names to source strings. Each template is parsed on first
    `get()` and cached. Useful for testing or embedded templates.

    Example:
            >>> loader = DictLoader({
            ...     "layout.mnd": "<html>{{{content}}}</html>",
            ...     "page.mnd": "Hi {{name}}",
            ... })
            >>> env = Environment(loader=loader)
            >>> env.get_template("page.mnd").render(name="Ann")
            'Hi Ann'

    Raises:
        TemplateNotFoundError: If template name not in mapping

    """

    __slots__ = ("_cache", "_lock", "_mapping")

    def __init__(self, mapping: Mapping[str, str], *, environment: Environment | None = None):
        super().__init__(environment)
        self._mapping = dict(mapping)
        self._cache: dict[str, Template] = {}
        self._lock = threading.Lock()

    def bind(self, environment: Environment) -> None:
        super().bind(environment)
        with self._lock:
            self._cache = {}

    def get(self, name: str) -> Template:
        template = self._cache.get(name)
        if template is not None:
            return template
        if name not in self._mapping:
            raise _not_found(name, sorted(self._mapping), "<dict>")

        template = self._parse(self._mapping[name], name, None)
        with self._lock:
            cache = dict(self._cache)
            cache[name] = template
            self._cache = cache
        return template

    def list_templates(self) -> list[str]:
        return sorted(self._mapping)
