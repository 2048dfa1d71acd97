"""Filter registry for Mandira environments.

Dict-like mapping of filter names to callables.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, ItemsView, Iterator, KeysView, Mapping, ValuesView
from typing import Any


class FilterRegistry:
    """Dict-like registry of filters.

    Supports:
        - registry['name'] = func
        - registry.register('name', func)
        - registry.update({'name': func})
        - func = registry['name']
        - 'name' in registry

    All mutations use copy-on-write: writers build a new dict under a lock
    and swap it in, so readers never lock and never see a half-applied update.
    """

    __slots__ = ("_filters", "_lock")

    def __init__(self, filters: Mapping[str, Callable[..., Any]] | None = None):
        self._filters: dict[str, Callable[..., Any]] = dict(filters or {})
        self._lock = threading.Lock()

    def register(self, name: str, func: Callable[..., Any]) -> None:
        """Register ``func`` under ``name``, replacing any existing filter."""
        if not callable(func):
            raise TypeError(f"Filter {name!r} must be callable, got {type(func).__name__}")
        with self._lock:
            new = self._filters.copy()
            new[name] = func
            self._filters = new

    def __setitem__(self, name: str, func: Callable[..., Any]) -> None:
        self.register(name, func)

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._filters[name]

    def __contains__(self, name: object) -> bool:
        return name in self._filters

    def __iter__(self) -> Iterator[str]:
        return iter(self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def get(
        self, name: str, default: Callable[..., Any] | None = None
    ) -> Callable[..., Any] | None:
        return self._filters.get(name, default)

    def update(self, mapping: Mapping[str, Callable[..., Any]]) -> None:
        """Batch update filters."""
        for name, func in mapping.items():
            if not callable(func):
                raise TypeError(f"Filter {name!r} must be callable, got {type(func).__name__}")
        with self._lock:
            new = self._filters.copy()
            new.update(mapping)
            self._filters = new

    def copy(self) -> dict[str, Callable[..., Any]]:
        """Return a copy of the underlying dict."""
        return self._filters.copy()

    def keys(self) -> KeysView[str]:
        return self._filters.keys()

    def values(self) -> ValuesView[Callable[..., Any]]:
        return self._filters.values()

    def items(self) -> ItemsView[str, Callable[..., Any]]:
        return self._filters.items()

    def __repr__(self) -> str:
        return f"<FilterRegistry {sorted(self._filters)!r}>"
