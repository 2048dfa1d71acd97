"""Tests for filter-chain and condition parsing."""

import pytest

from mandira.environment.exceptions import ErrorCode, TemplateSyntaxError
from mandira.lexer import tokenize
from mandira.nodes import Comparison, Cond, Conditional, Const, Lookup, VarExpr
from mandira.parser import (
    ParseError,
    TokenStream,
    parse_condition_tag,
    parse_var_expression,
    parse_var_tag,
)


def stream(text: str) -> TokenStream:
    return TokenStream(tokenize(text))


class TestTokenStream:
    """Cursor semantics."""

    def test_peek_next_prev(self):
        s = stream("a | b")
        assert s.peek().value == "a"
        assert s.next().value == "a"
        assert s.peek().value == "|"
        assert s.prev().value == "a"
        assert s.remaining == 3

    def test_exhausted_stream_returns_none(self):
        s = stream("a")
        s.next()
        assert s.peek() is None
        assert s.next() is None
        assert s.remaining == 0

    def test_peek_is_ignores_string_literals(self):
        assert stream("|").peek_is("|")
        assert not stream('"|"').peek_is("|")
        assert stream("and").peek_is("and", "or")


class TestVarExpressions:
    """Lookups followed by filter chains."""

    def test_bare_name(self):
        expr = parse_var_expression(stream("hello"))
        assert expr.lookup.name == "hello"
        assert expr.filters == ()

    def test_single_filter(self):
        expr = parse_var_expression(stream("hello|upper"))
        assert expr.lookup.name == "hello"
        assert [f.name for f in expr.filters] == ["upper"]
        assert expr.filters[0].args == ()

    def test_filter_chain_with_arguments(self):
        expr = parse_var_expression(stream('hello|upper|join(", ", 3.5, someVar)|fake("hi")'))
        assert expr.lookup.name == "hello"
        assert [f.name for f in expr.filters] == ["upper", "join", "fake"]

        join = expr.filters[1]
        assert len(join.args) == 3
        assert isinstance(join.args[0], Const) and join.args[0].value == ", "
        assert isinstance(join.args[1], Const) and join.args[1].value == 3.5
        assert isinstance(join.args[2], Lookup) and join.args[2].name == "someVar"

        fake = expr.filters[2]
        assert len(fake.args) == 1
        assert fake.args[0].value == "hi"

    def test_integer_argument_is_int(self):
        expr = parse_var_tag("name|index(3)")
        (arg,) = expr.filters[0].args
        assert arg.value == 3
        assert isinstance(arg.value, int)

    def test_empty_argument_list(self):
        expr = parse_var_tag("name|upper()")
        assert expr.filters[0].args == ()

    def test_stops_before_non_pipe_token(self):
        s = stream("a|upper == b")
        parse_var_expression(s)
        assert s.peek().value == "=="

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("name|", "expected filter name after '|'"),
            ("name|(", "expected filter name after '|'"),
            ("name|join(", "unclosed filter argument list"),
            ('name|join("a"', "unclosed filter argument list"),
            ("name|join(,)", "expected filter argument"),
            ('name|join("a" "b")', "expected comma (,)"),
        ],
    )
    def test_filter_errors(self, text, message):
        with pytest.raises(ParseError) as exc_info:
            parse_var_tag(text)
        assert message in str(exc_info.value)
        assert exc_info.value.code is ErrorCode.INVALID_FILTER

    def test_name_must_come_first(self):
        with pytest.raises(ParseError, match="expected a name"):
            parse_var_tag('"literal"')

    @pytest.mark.parametrize("text", ["2024", "1.5", "not", "and"])
    def test_any_word_names_the_lookup(self, text):
        expr = parse_var_tag(text)
        assert expr.lookup.name == text
        assert expr.filters == ()

    def test_numeric_name_with_filters(self):
        expr = parse_var_tag("2024|upper")
        assert expr.lookup.name == "2024"
        assert [f.name for f in expr.filters] == ["upper"]

    def test_keyword_filter_argument_is_lookup(self):
        (call,) = parse_var_tag("name|join(or)").filters
        (arg,) = call.args
        assert isinstance(arg, Lookup)
        assert arg.name == "or"

    def test_operator_cannot_name_lookup(self):
        with pytest.raises(ParseError, match="expected a name"):
            parse_var_tag("== a")

    def test_trailing_tokens_rejected(self):
        with pytest.raises(ParseError, match="unexpected token, found 'b'"):
            parse_var_tag("a b")

    def test_empty_expression(self):
        with pytest.raises(ParseError, match="empty expression"):
            parse_var_expression(stream(""))


class TestConditions:
    """Condition structure and precedence."""

    def test_single_operand(self):
        cond = parse_condition_tag(" name")
        assert isinstance(cond, Conditional)
        (operand,) = cond.operands
        assert isinstance(operand, Cond)
        assert isinstance(operand.operand, VarExpr)
        assert operand.negate is False

    def test_comparison(self):
        cond = parse_condition_tag(' name == "john"')
        (comparison,) = cond.operands
        assert isinstance(comparison, Comparison)
        assert comparison.op == "=="
        assert comparison.left.operand.lookup.name == "name"
        assert comparison.right.operand.value == "john"

    def test_comparison_with_filters(self):
        cond = parse_condition_tag(" name|len > 4")
        (comparison,) = cond.operands
        assert comparison.op == ">"
        assert comparison.left.operand.filters[0].name == "len"
        assert comparison.right.operand.value == 4

    def test_combinators_are_flat(self):
        """and/or share one level; comparisons bind tighter."""
        cond = parse_condition_tag(' name == "john" or name == "ted" and admin')
        assert cond.operators == ("or", "and")
        assert [type(op) for op in cond.operands] == [Comparison, Comparison, Cond]

    def test_not_toggles(self):
        assert parse_condition_tag(" not a").operands[0].negate is True
        assert parse_condition_tag(" not not a").operands[0].negate is False

    def test_parenthesised_group(self):
        cond = parse_condition_tag(" a and not (b or c)")
        assert cond.operators == ("and",)
        group = cond.operands[1]
        assert isinstance(group, Conditional)
        assert group.negate is True
        assert group.operators == ("or",)

    def test_literal_operand(self):
        cond = parse_condition_tag(" 1 < 2")
        (comparison,) = cond.operands
        assert comparison.left.operand.value == 1
        assert comparison.right.operand.value == 2

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            (" (a or b", "missing ')'"),
            (" a)", "unmatched ')'"),
            (" a b", "expected 'and' or 'or'"),
            (" not a == b", "'not' cannot be applied to a comparison"),
            (" a == not b", "'not' cannot be applied to a comparison"),
            (" (a) == b", "comparison operands must be values"),
            (" a == (b)", "comparison operands must be values"),
            (" a and", "expected a value"),
            (" a ==", "expected a value"),
        ],
    )
    def test_condition_errors(self, text, message):
        with pytest.raises(ParseError) as exc_info:
            parse_condition_tag(text)
        assert message in str(exc_info.value)

    def test_empty_condition(self):
        with pytest.raises(ParseError, match=r"\?if requires a condition") as exc_info:
            parse_condition_tag("   ")
        assert exc_info.value.code is ErrorCode.INVALID_CONDITIONAL

    def test_invalid_token_propagates(self):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse_condition_tag(" a = b")
        assert "invalid token" in str(exc_info.value)
