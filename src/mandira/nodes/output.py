"""Output nodes for Mandira AST."""

from __future__ import annotations

from dataclasses import dataclass

from mandira.nodes.base import Node
from mandira.nodes.expressions import VarExpr


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal template text between tags."""

    value: str


@dataclass(frozen=True, slots=True)
class Variable(Node):
    """Output expression: {{ expr }} escaped, {{{ expr }}} raw."""

    expr: VarExpr
    raw: bool = False
