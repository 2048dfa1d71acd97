"""Expression parsing for Mandira tags.

Grammar:
    atom        := STRING | INT | FLOAT | WORD | KEYWORD
    filter      := WORD [ "(" atom ( "," atom )* ")" ]
    var_expr    := name ( "|" filter )*
    name        := WORD | INT | FLOAT | KEYWORD

    condition   := term ( ( "and" | "or" ) term )*
    term        := comparison | unary
    comparison  := value cmp_op value
    unary       := [ "not" ] ( value | "(" condition ")" )
    value       := STRING | INT | FLOAT | var_expr
    cmp_op      := "<" | "<=" | ">" | ">=" | "==" | "!="

Precedence, high to low: parentheses, comparisons, ``and``/``or``. The two
combinators share a level and apply strictly left to right, so
``a or b and c`` means ``(a or b) and c``.

``not`` may not sit directly on either side of a comparison; write the
converse operator instead (``a != b`` rather than ``not a == b``).
"""

from __future__ import annotations

from mandira._types import COMPARISON_OPERATORS, Token, TokenType
from mandira.environment.exceptions import ErrorCode
from mandira.lexer import tokenize
from mandira.nodes import (
    Comparison,
    Cond,
    ConditionOperand,
    Conditional,
    Const,
    FilterCall,
    Lookup,
    VarExpr,
)
from mandira.parser.errors import ParseError


class TokenStream:
    """Cursor over a token list with peek/next/prev semantics.

    ``peek()`` and ``next()`` return None once the stream is exhausted.
    """

    __slots__ = ("_lineno", "_pos", "_tokens")

    def __init__(self, tokens: list[Token], lineno: int = 1):
        self._tokens = tokens
        self._pos = 0
        self._lineno = lineno

    @property
    def remaining(self) -> int:
        return len(self._tokens) - self._pos

    @property
    def lineno(self) -> int:
        return self._lineno

    def peek(self) -> Token | None:
        if self._pos >= len(self._tokens):
            return None
        return self._tokens[self._pos]

    def next(self) -> Token | None:
        if self._pos >= len(self._tokens):
            return None
        self._pos += 1
        return self._tokens[self._pos - 1]

    def prev(self) -> Token | None:
        if self._pos > 0:
            self._pos -= 1
        return self.peek()

    def peek_is(self, *values: str) -> bool:
        """True if the next token is an operator or keyword in ``values``."""
        token = self.peek()
        return (
            token is not None
            and token.type in (TokenType.OPERATOR, TokenType.KEYWORD)
            and token.value in values
        )

    def error(
        self,
        message: str,
        token: Token | None = None,
        code: ErrorCode = ErrorCode.INVALID_EXPRESSION,
    ) -> ParseError:
        if token is None:
            token = self.peek()
        if token is not None:
            message = f"{message}, found {token.value!r}"
        return ParseError(
            message,
            self._lineno,
            col_offset=token.col_offset if token is not None else None,
            code=code,
        )

    def __repr__(self) -> str:
        return f"<TokenStream {[t.value for t in self._tokens]!r} at {self._pos}>"


def _const(token: Token) -> Const:
    if token.type is TokenType.INT:
        value: str | int | float = int(token.value)
    elif token.type is TokenType.FLOAT:
        value = float(token.value)
    else:
        value = token.value
    return Const(lineno=token.lineno, col_offset=token.col_offset, value=value)


def _is_literal(token: Token) -> bool:
    return token.type in (TokenType.STRING, TokenType.INT, TokenType.FLOAT)


def parse_atom(token: Token) -> Const | Lookup:
    """Parse a filter argument: a literal, or any other word as a lookup."""
    if _is_literal(token):
        return _const(token)
    return Lookup(lineno=token.lineno, col_offset=token.col_offset, name=token.value)


def parse_filter_call(stream: TokenStream) -> FilterCall:
    """Parse the part after a ``|``: ``name`` or ``name(arg, ...)``."""
    name = stream.next()
    if name is None or name.type is not TokenType.WORD:
        raise stream.error(
            "expected filter name after '|'", name, code=ErrorCode.INVALID_FILTER
        )

    args: list[Const | Lookup] = []
    if stream.peek_is("("):
        stream.next()  # consume '('
        if stream.peek_is(")"):
            stream.next()
        else:
            while True:
                arg = stream.next()
                if arg is None:
                    raise stream.error(
                        "unclosed filter argument list", code=ErrorCode.INVALID_FILTER
                    )
                if arg.type is TokenType.OPERATOR:
                    raise stream.error(
                        "expected filter argument", arg, code=ErrorCode.INVALID_FILTER
                    )
                args.append(parse_atom(arg))

                sep = stream.next()
                if sep is None:
                    raise stream.error(
                        "unclosed filter argument list", code=ErrorCode.INVALID_FILTER
                    )
                if sep.type is TokenType.OPERATOR and sep.value == ")":
                    break
                if not (sep.type is TokenType.OPERATOR and sep.value == ","):
                    raise stream.error("expected comma (,)", sep, code=ErrorCode.INVALID_FILTER)

    return FilterCall(
        lineno=name.lineno,
        col_offset=name.col_offset,
        name=name.value,
        args=tuple(args),
    )


def parse_var_expression(stream: TokenStream) -> VarExpr:
    """Parse a lookup followed by zero or more ``|filter`` calls.

    The leading token names the lookup whatever its lexical class, so
    ``2024`` and ``not`` are context keys here.
    Stops at the first token that is not ``|``, leaving it unconsumed.
    """
    first = stream.next()
    if first is None:
        raise ParseError("empty expression", stream.lineno)
    if first.type in (TokenType.OPERATOR, TokenType.STRING):
        raise stream.error("expected a name", first)
    lookup = Lookup(lineno=first.lineno, col_offset=first.col_offset, name=first.value)

    filters: list[FilterCall] = []
    while stream.peek_is("|"):
        stream.next()  # consume '|'
        filters.append(parse_filter_call(stream))

    return VarExpr(
        lineno=first.lineno,
        col_offset=first.col_offset,
        lookup=lookup,
        filters=tuple(filters),
    )


def _parse_value(stream: TokenStream) -> VarExpr | Const:
    token = stream.peek()
    if token is None:
        raise ParseError("expected a value, found nothing", stream.lineno)
    if _is_literal(token):
        stream.next()
        return _const(token)
    if token.type is not TokenType.WORD:
        raise stream.error("expected a value", token)
    return parse_var_expression(stream)


def _parse_term(stream: TokenStream) -> ConditionOperand:
    start = stream.peek()
    negate = False
    while stream.peek_is("not"):
        stream.next()
        negate = not negate

    operand: ConditionOperand
    if stream.peek_is("("):
        stream.next()  # consume '('
        inner = _parse_conditional(stream, nested=True)
        operand = Conditional(
            lineno=inner.lineno,
            col_offset=inner.col_offset,
            operands=inner.operands,
            operators=inner.operators,
            negate=inner.negate != negate,
        )
        if stream.peek_is(*COMPARISON_OPERATORS):
            raise stream.error("comparison operands must be values")
        return operand

    value = _parse_value(stream)
    left = Cond(lineno=value.lineno, col_offset=value.col_offset, operand=value, negate=negate)

    if not stream.peek_is(*COMPARISON_OPERATORS):
        return left

    op = stream.next()
    assert op is not None
    if negate:
        raise ParseError(
            "'not' cannot be applied to a comparison; use the converse operator",
            stream.lineno,
            col_offset=start.col_offset if start is not None else None,
        )
    if stream.peek_is("not"):
        raise stream.error("'not' cannot be applied to a comparison; use the converse operator")
    if stream.peek_is("("):
        raise stream.error("comparison operands must be values")
    right_value = _parse_value(stream)
    right = Cond(lineno=right_value.lineno, col_offset=right_value.col_offset, operand=right_value)
    return Comparison(
        lineno=left.lineno,
        col_offset=left.col_offset,
        op=op.value,  # type: ignore[arg-type]
        left=left,
        right=right,
    )


def _parse_conditional(stream: TokenStream, *, nested: bool) -> Conditional:
    start = stream.peek()
    operands: list[ConditionOperand] = []
    operators: list[str] = []

    while True:
        operands.append(_parse_term(stream))

        token = stream.peek()
        if token is None:
            if nested:
                raise ParseError("missing ')'", stream.lineno)
            break
        if stream.peek_is(")"):
            if not nested:
                raise stream.error("unmatched ')'")
            stream.next()
            break
        if stream.peek_is("and", "or"):
            operators.append(token.value)
            stream.next()
            continue
        raise stream.error("expected 'and' or 'or'")

    return Conditional(
        lineno=start.lineno if start is not None else stream.lineno,
        col_offset=start.col_offset if start is not None else 0,
        operands=tuple(operands),
        operators=tuple(operators),  # type: ignore[arg-type]
    )


def parse_condition(stream: TokenStream) -> Conditional:
    """Parse a boolean condition, consuming the whole stream."""
    return _parse_conditional(stream, nested=False)


def _require_end(stream: TokenStream) -> None:
    if stream.remaining:
        raise stream.error("unexpected token")


def parse_var_tag(text: str, lineno: int = 1) -> VarExpr:
    """Tokenize and parse the content of a variable tag."""
    stream = TokenStream(tokenize(text, lineno=lineno), lineno)
    expr = parse_var_expression(stream)
    _require_end(stream)
    return expr


def parse_condition_tag(text: str, lineno: int = 1) -> Conditional:
    """Tokenize and parse the expression of a ``?if`` tag."""
    stream = TokenStream(tokenize(text, lineno=lineno), lineno)
    if not stream.remaining:
        raise ParseError(
            "?if requires a condition", lineno, code=ErrorCode.INVALID_CONDITIONAL
        )
    condition = parse_condition(stream)
    _require_end(stream)
    return condition
