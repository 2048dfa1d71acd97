"""Template structure nodes for Mandira AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from mandira.nodes.base import Node
from mandira.nodes.expressions import Conditional


@dataclass(frozen=True, slots=True)
class Section(Node):
    """Section block.

    ``{{#name}}...{{/name}}`` repeats or includes its body depending on the
    value bound to ``name``. ``{{?if expr}}...{{?else}}...{{/if}}`` has a
    ``condition`` and is named ``if``.
    """

    name: str
    body: Sequence[Node]
    else_body: Sequence[Node] = ()
    condition: Conditional | None = None

    @property
    def is_conditional(self) -> bool:
        return self.condition is not None


@dataclass(frozen=True, slots=True)
class Template(Node):
    """Root node of a parsed template."""

    body: Sequence[Node]
    name: str | None = None
