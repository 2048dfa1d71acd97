"""Token types shared by the Mandira tokenizer and expression parser."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class TokenType(Enum):
    """Kinds of token produced from the inside of a tag."""

    WORD = "word"
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    OPERATOR = "operator"
    KEYWORD = "keyword"


class Token(NamedTuple):
    """A single expression token.

    Attributes:
        type: Token kind
        value: Token text. For STRING tokens this is the literal's content
            with the surrounding quotes removed and ``\\"`` unescaped.
        col_offset: 0-based offset of the token inside the tag content
        lineno: Line of the enclosing tag (1-based)
    """

    type: TokenType
    value: str
    col_offset: int = 0
    lineno: int = 1

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r})"


# Comparison operators accepted between two condition operands
COMPARISON_OPERATORS: frozenset[str] = frozenset({"<", "<=", ">", ">=", "==", "!="})

# Single-character punctuation that is always a token on its own
PUNCTUATION: frozenset[str] = frozenset({"|", "(", ")", ","})

KEYWORDS: frozenset[str] = frozenset({"and", "or", "not"})
