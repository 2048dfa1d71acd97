"""Expression nodes for Mandira AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from mandira.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Expr(Node):
    """Base class for expressions."""


@dataclass(frozen=True, slots=True)
class Const(Expr):
    """Literal value: "text", 42, 1.5"""

    value: str | int | float


@dataclass(frozen=True, slots=True)
class Lookup(Expr):
    """Name resolved against the context chain at render time: {{ user }}

    ``.`` is the current value; ``.index`` and ``.index1`` are the loop
    position inside a sequence section.
    """

    name: str


@dataclass(frozen=True, slots=True)
class FilterCall(Expr):
    """Filter application: | name or | name(arg, ...)

    Lookup arguments are resolved when the filter fires, not at parse time.
    """

    name: str
    args: Sequence[Const | Lookup] = ()


@dataclass(frozen=True, slots=True)
class VarExpr(Expr):
    """A lookup followed by zero or more filters: name|index(0)|upper"""

    lookup: Lookup
    filters: Sequence[FilterCall] = ()


@dataclass(frozen=True, slots=True)
class Cond(Expr):
    """Atomic condition operand with optional negation: not name|len"""

    operand: VarExpr | Const
    negate: bool = False


@dataclass(frozen=True, slots=True)
class Comparison(Expr):
    """Binary comparison between two atomic operands: name == "john" """

    op: Literal["<", "<=", ">", ">=", "==", "!="]
    left: Cond
    right: Cond


@dataclass(frozen=True, slots=True)
class Conditional(Expr):
    """Boolean combination evaluated strictly left to right.

    ``operands[0] operators[0] operands[1] operators[1] ...`` with no
    precedence between ``and`` and ``or``. Comparisons inside are resolved
    before any combinator is applied.
    """

    operands: Sequence[Cond | Comparison | Conditional]
    operators: Sequence[Literal["and", "or"]] = ()
    negate: bool = False

    def __post_init__(self) -> None:
        if len(self.operands) != len(self.operators) + 1:
            raise ValueError(
                f"Conditional needs one more operand than operators "
                f"(got {len(self.operands)} operands, {len(self.operators)} operators)"
            )


ConditionOperand = Cond | Comparison | Conditional
