"""Tree-walking renderer for Mandira templates.

`Renderer` walks a parsed node tree against a `ContextChain` and returns the
output text. Output is accumulated StringBuilder-style in a list and joined
once at the end.

Failure semantics:
    Rendering never fails because of the data. An unresolved name, a missing
    filter, an argument that cannot be coerced or a filter that raises all
    make that one expression render as empty text, and rendering carries on.
    A value whose conversion to text, length check or iteration raises
    renders nothing in the same way. Each such event is logged at DEBUG on
    this module's logger. A comparison that cannot be evaluated is False.

Thread-Safety:
    A Renderer holds no per-render state; one instance can render any
    number of trees concurrently.

"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from mandira.context import ContextChain
from mandira.nodes import (
    Comparison,
    Cond,
    Conditional,
    Const,
    FilterCall,
    Lookup,
    Node,
    Section,
    Template,
    Text,
    Variable,
    VarExpr,
)
from mandira.utils.html import html_escape
from mandira.values import (
    MISSING,
    ValueKind,
    compare,
    deref,
    is_falsy,
    is_truthy,
    iterate,
    kind_of,
    stringify,
    to_int,
)

logger = logging.getLogger(__name__)

Coercer = Callable[[Any], Any]


def _passthrough(value: Any) -> Any:
    return deref(value)


# Annotation → argument coercion. Annotations may be strings when the filter's
# module uses postponed evaluation.
_COERCERS: dict[object, Coercer] = {
    str: stringify,
    "str": stringify,
    int: to_int,
    "int": to_int,
}


def _coercer_for(annotation: object) -> Coercer:
    try:
        return _COERCERS.get(annotation, _passthrough)
    except TypeError:
        # Unhashable annotation object
        return _passthrough


def _uncached_argument_coercers(func: Callable[..., Any]) -> tuple[tuple[Coercer, ...], Coercer]:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return (), _passthrough

    positional: list[Coercer] = []
    rest: Coercer = _passthrough
    params = list(signature.parameters.values())
    for param in params[1:]:
        coercer = _coercer_for(param.annotation)
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            positional.append(coercer)
        elif param.kind is param.VAR_POSITIONAL:
            rest = coercer
            break
    return tuple(positional), rest


_cached_argument_coercers = functools.lru_cache(maxsize=256)(_uncached_argument_coercers)


def argument_coercers(func: Callable[..., Any]) -> tuple[tuple[Coercer, ...], Coercer]:
    """Coercion functions for the arguments after a filter's first parameter.

    Returns:
        (per-position coercers, coercer for any further ``*args``)
    """
    try:
        return _cached_argument_coercers(func)
    except TypeError:
        # Unhashable callable
        return _uncached_argument_coercers(func)


def coerce_arguments(func: Callable[..., Any], args: Sequence[Any]) -> list[Any]:
    """Coerce looked-up or literal filter arguments to ``func``'s declared kinds.

    Raises:
        ValueError: If an argument has no interpretation as the declared kind
    """
    positional, rest = argument_coercers(func)
    coerced = []
    for i, arg in enumerate(args):
        coercer = positional[i] if i < len(positional) else rest
        coerced.append(coercer(arg))
    return coerced


class Renderer:
    """Render Mandira node trees.

    Args:
        filters: Mapping of filter name to callable, usually the
            environment's `FilterRegistry`. It is read at render time, so
            filters added later are visible.
        autoescape: HTML-escape ``{{ }}`` output. ``{{{ }}}`` is never escaped.
    """

    __slots__ = ("autoescape", "filters")

    def __init__(self, filters: Mapping[str, Callable[..., Any]], autoescape: bool = True):
        self.filters = filters
        self.autoescape = autoescape

    def render(self, node: Node, chain: ContextChain) -> str:
        buf: list[str] = []
        self._render_node(node, chain, buf)
        return "".join(buf)

    # Nodes

    def _render_node(self, node: Node, chain: ContextChain, buf: list[str]) -> None:
        handler = self._NODE_HANDLERS.get(type(node))
        if handler is None:
            raise TypeError(f"Cannot render node of type {type(node).__name__}")
        handler(self, node, chain, buf)

    def _render_nodes(self, nodes: Sequence[Node], chain: ContextChain, buf: list[str]) -> None:
        for node in nodes:
            self._render_node(node, chain, buf)

    def _render_text(self, node: Text, chain: ContextChain, buf: list[str]) -> None:
        buf.append(node.value)

    def _render_variable(self, node: Variable, chain: ContextChain, buf: list[str]) -> None:
        value = self.evaluate_var_expr(node.expr, chain)
        if value is MISSING:
            return
        try:
            text = stringify(value)
        except RecursionError:
            raise
        except Exception as e:
            logger.debug(
                "Value of %r could not be rendered (line %d): %s",
                node.expr.lookup.name,
                node.lineno,
                e,
            )
            return
        if node.raw or not self.autoescape:
            buf.append(text)
        else:
            buf.append(html_escape(text))

    def _render_section(self, node: Section, chain: ContextChain, buf: list[str]) -> None:
        if node.condition is not None:
            if self.evaluate_condition(node.condition, chain):
                self._render_nodes(node.body, chain, buf)
            else:
                self._render_nodes(node.else_body, chain, buf)
            return

        value = deref(chain.lookup(node.name))
        try:
            if is_falsy(value):
                return
            kind = kind_of(value)
            items = list(iterate(value)) if kind is ValueKind.SEQ else ()
        except RecursionError:
            raise
        except Exception as e:
            logger.debug(
                "Section %r could not be inspected (line %d): %s", node.name, node.lineno, e
            )
            return

        if kind is ValueKind.SEQ:
            for index, item in enumerate(items):
                self._render_nodes(node.body, chain.push(item, index), buf)
        elif kind is ValueKind.RECORD:
            self._render_nodes(node.body, chain.push(value), buf)
        else:
            self._render_nodes(node.body, chain, buf)

    def _render_template(self, node: Template, chain: ContextChain, buf: list[str]) -> None:
        self._render_nodes(node.body, chain, buf)

    _NODE_HANDLERS: dict[type, Callable[..., None]] = {
        Text: _render_text,
        Variable: _render_variable,
        Section: _render_section,
        Template: _render_template,
    }

    # Expressions

    def evaluate_var_expr(self, expr: VarExpr, chain: ContextChain) -> Any:
        """Resolve the lookup and thread it through each filter.

        Returns:
            The final value, or MISSING if any step failed
        """
        value = chain.lookup(expr.lookup.name)
        if value is MISSING:
            return MISSING
        for call in expr.filters:
            value = self._apply_filter(call, value, chain)
            if value is MISSING:
                return MISSING
        return value

    def _apply_filter(self, call: FilterCall, value: Any, chain: ContextChain) -> Any:
        func = self.filters.get(call.name)
        if func is None:
            logger.debug("Unknown filter %r (line %d)", call.name, call.lineno)
            return MISSING

        args = []
        for arg in call.args:
            if isinstance(arg, Lookup):
                resolved = chain.lookup(arg.name)
                if resolved is MISSING:
                    logger.debug(
                        "Argument %r of filter %r is not defined (line %d)",
                        arg.name,
                        call.name,
                        call.lineno,
                    )
                    return MISSING
                args.append(resolved)
            else:
                args.append(arg.value)

        try:
            coerced = coerce_arguments(func, args)
        except (TypeError, ValueError) as e:
            logger.debug("Bad arguments for filter %r (line %d): %s", call.name, call.lineno, e)
            return MISSING

        try:
            return func(deref(value), *coerced)
        except Exception as e:
            logger.debug("Filter %r failed (line %d): %s", call.name, call.lineno, e)
            return MISSING

    def _operand_value(self, operand: VarExpr | Const, chain: ContextChain) -> Any:
        if isinstance(operand, Const):
            return operand.value
        return self.evaluate_var_expr(operand, chain)

    def _evaluate_cond(self, node: Cond, chain: ContextChain) -> bool:
        return is_truthy(self._operand_value(node.operand, chain)) != node.negate

    def _evaluate_comparison(self, node: Comparison, chain: ContextChain) -> bool:
        left = self._operand_value(node.left.operand, chain)
        right = self._operand_value(node.right.operand, chain)
        return compare(node.op, left, right)

    def evaluate_condition(self, node: Conditional, chain: ContextChain) -> bool:
        """Evaluate a condition tree.

        Every operand (comparisons included) is reduced to a boolean first;
        then ``and``/``or`` are applied strictly left to right.
        """
        results = [self._evaluate_operand(operand, chain) for operand in node.operands]
        result = results[0]
        for op, value in zip(node.operators, results[1:], strict=True):
            result = (result and value) if op == "and" else (result or value)
        return result != node.negate

    def _evaluate_operand(self, node: Cond | Comparison | Conditional, chain: ContextChain) -> bool:
        if isinstance(node, Cond):
            return self._evaluate_cond(node, chain)
        if isinstance(node, Comparison):
            return self._evaluate_comparison(node, chain)
        return self.evaluate_condition(node, chain)
