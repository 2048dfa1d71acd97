"""Tokenizer for Mandira tag expressions.

Splits the inside of a ``{{ }}`` tag, or the condition of a ``?if``, into a
flat token list:

    name|join(", ", sep) >= 9
    → WORD name, OP |, WORD join, OP (, STRING ", ", OP ,, WORD sep,
      OP ), OP >=, INT 9

Rules:
- Whitespace separates tokens and is discarded.
- ``<`` and ``>`` stand alone or combine with a following ``=``.
- ``!`` and ``=`` must be followed by ``=``; alone they are invalid.
- ``"`` opens a string literal ending at the next ``"`` not preceded by a
  backslash. An unterminated literal runs to the end of input.
- ``|``, ``(``, ``)`` and ``,`` are always single tokens.
- Anything else accumulates into a word, which is then classified as an
  integer, a float, a keyword (``and``/``or``/``not``) or a plain word.

No token is ever empty.
"""

from __future__ import annotations

from mandira._types import KEYWORDS, PUNCTUATION, Token, TokenType
from mandira.environment.exceptions import ErrorCode, TemplateSyntaxError

_WHITESPACE = frozenset(" \t\r\n")


def _classify_word(word: str) -> TokenType:
    if word in KEYWORDS:
        return TokenType.KEYWORD
    if not any(char.isdigit() for char in word):
        # float() would otherwise accept names such as "inf" or "nan"
        return TokenType.WORD
    try:
        int(word, 10)
        return TokenType.INT
    except ValueError:
        pass
    try:
        float(word)
        return TokenType.FLOAT
    except ValueError:
        return TokenType.WORD


def tokenize(expr: str, *, lineno: int = 1) -> list[Token]:
    """Tokenize an expression.

    Args:
        expr: Tag content (without delimiters)
        lineno: Line of the enclosing tag, recorded on tokens and errors

    Returns:
        Tokens in source order

    Raises:
        TemplateSyntaxError: On a lone ``!`` or ``=``
    """
    tokens: list[Token] = []
    append = tokens.append
    run = 0
    pos = 0
    length = len(expr)

    def flush(end: int) -> None:
        if run < end:
            word = expr[run:end]
            append(Token(_classify_word(word), word, run, lineno))

    while pos < length:
        char = expr[pos]

        if char in _WHITESPACE:
            flush(pos)
            run = pos + 1

        elif char in "<>":
            flush(pos)
            if pos + 1 < length and expr[pos + 1] == "=":
                append(Token(TokenType.OPERATOR, char + "=", pos, lineno))
                pos += 1
            else:
                append(Token(TokenType.OPERATOR, char, pos, lineno))
            run = pos + 1

        elif char in "!=":
            flush(pos)
            if pos + 1 < length and expr[pos + 1] == "=":
                append(Token(TokenType.OPERATOR, char + "=", pos, lineno))
                pos += 1
            else:
                raise TemplateSyntaxError(
                    f"invalid token: {char}",
                    lineno,
                    col_offset=pos,
                    code=ErrorCode.INVALID_TOKEN,
                )
            run = pos + 1

        elif char == '"':
            flush(pos)
            start = pos
            pos += 1
            while pos < length and not (expr[pos] == '"' and expr[pos - 1] != "\\"):
                pos += 1
            literal = expr[start + 1 : pos].replace('\\"', '"')
            append(Token(TokenType.STRING, literal, start, lineno))
            run = pos + 1

        elif char in PUNCTUATION:
            flush(pos)
            append(Token(TokenType.OPERATOR, char, pos, lineno))
            run = pos + 1

        pos += 1

    flush(length)
    return tokens
