"""Context chain and name resolution for Mandira rendering.

A render sees its data as a chain of frames, innermost first. Each frame
holds one value and, inside a sequence section, the element's loop index.
Sections push frames; nothing is ever popped, because every push returns a
new chain:

    chain = ContextChain.from_values(page, site)
    inner = chain.push(user, index=0)

Resolution of a name walks the frames innermost to outermost:

1. ``.`` is the frame's own value.
2. ``.index`` / ``.index1`` are the 0- and 1-based loop index, if the frame
   has one.
3. On a record, a zero-argument method, key or field named ``name``.
4. Otherwise fall through to the next frame.

A name found nowhere resolves to `MISSING`. Lookup never raises.

Thread-Safety:
    Chains are immutable and may be shared between threads.

"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from mandira.values import MISSING, ValueKind, deref, kind_of, resolve_member

logger = logging.getLogger(__name__)

CURRENT = "."
INDEX = ".index"
INDEX1 = ".index1"


@dataclass(frozen=True, slots=True)
class Frame:
    """One level of the context chain."""

    value: Any
    index: int | None = None

    def resolve(self, name: str) -> Any:
        """Resolve ``name`` in this frame alone; MISSING if it is not here."""
        value = deref(self.value)
        if name == CURRENT:
            return value
        if self.index is not None:
            if name == INDEX:
                return self.index
            if name == INDEX1:
                return self.index + 1
        if kind_of(value) is ValueKind.RECORD:
            return resolve_member(value, name)
        return MISSING


class ContextChain:
    """Immutable stack of frames, innermost first."""

    __slots__ = ("_frames",)

    def __init__(self, frames: tuple[Frame, ...] = ()):
        self._frames = frames

    @classmethod
    def from_values(cls, *values: Any) -> ContextChain:
        """Build a chain from plain values; the first value is innermost."""
        return cls(tuple(Frame(value) for value in values))

    def push(self, value: Any, index: int | None = None) -> ContextChain:
        """Return a new chain with ``value`` as the innermost frame."""
        return ContextChain((Frame(value, index), *self._frames))

    @property
    def innermost(self) -> Frame | None:
        return self._frames[0] if self._frames else None

    def lookup(self, name: str) -> Any:
        """Resolve ``name`` against the chain.

        Returns:
            The bound value, or MISSING if no frame has it
        """
        for frame in self._frames:
            value = frame.resolve(name)
            if value is not MISSING:
                return value
        logger.debug("Name %r not found in %d context frame(s)", name, len(self._frames))
        return MISSING

    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __repr__(self) -> str:
        return f"<ContextChain depth={len(self._frames)}>"


def lookup(chain: ContextChain, name: str) -> Any:
    """Resolve ``name`` against ``chain``. See `ContextChain.lookup`."""
    return chain.lookup(name)
