"""Mandira AST nodes.

Immutable, slotted dataclasses. A parsed template is a strict tree rooted at
`Template`; sections own their children.

Output:
    Text, Variable

Structure:
    Section, Template

Expressions:
    Const, Lookup, FilterCall, VarExpr, Cond, Comparison, Conditional
"""

from mandira.nodes.base import Node
from mandira.nodes.expressions import (
    Comparison,
    Cond,
    ConditionOperand,
    Conditional,
    Const,
    Expr,
    FilterCall,
    Lookup,
    VarExpr,
)
from mandira.nodes.output import Text, Variable
from mandira.nodes.structure import Section, Template

__all__ = [
    "Comparison",
    "Cond",
    "ConditionOperand",
    "Conditional",
    "Const",
    "Expr",
    "FilterCall",
    "Lookup",
    "Node",
    "Section",
    "Template",
    "Text",
    "VarExpr",
    "Variable",
]
