"""Mandira parser.

`Parser` turns template text into a node tree; the expression functions
parse the contents of individual tags.
"""

from mandira.parser.core import Parser
from mandira.parser.errors import ParseError
from mandira.parser.expressions import (
    TokenStream,
    parse_condition,
    parse_condition_tag,
    parse_var_expression,
    parse_var_tag,
)

__all__ = [
    "ParseError",
    "Parser",
    "TokenStream",
    "parse_condition",
    "parse_condition_tag",
    "parse_var_expression",
    "parse_var_tag",
]
