"""Value model for Mandira rendering contexts.

Render contexts are plain Python data. Rather than probing objects ad hoc at
every step, the engine classifies each datum into one of a closed set of
kinds and then matches on the kind:

    NULL      None, the MISSING sentinel, a dead weak reference
    BOOL      bool
    INT       int
    FLOAT     float
    STR       str, bytes, bytearray
    SEQ       sequences (not strings, not named tuples), sets, mapping views,
              one-shot iterators such as generators
    CALLABLE  functions, methods, builtins, functools.partial
    RECORD    everything else: mappings, named tuples, dataclasses, objects

Records expose their members through a single interface, `resolve_member()`:
mappings by key, other objects by zero-argument method or attribute.

Nothing here copies caller data. Sequences and records are read in place.

Thread-Safety:
    All functions are stateless.

"""

from __future__ import annotations

import functools
import inspect
import logging
import operator
import weakref
from collections.abc import Callable, Iterator, Mapping, MappingView, Sequence, Set, Sized
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel for a name that resolved to nothing.

    Distinct from None so callers can tell "bound to None" from "unbound".
    Stringifies as ``""`` and is falsy, so it is harmless if it leaks into
    output.
    """

    __slots__ = ()
    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __str__(self) -> str:
        return ""

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class ValueKind(Enum):
    """Closed set of value kinds understood by the renderer."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STR = "str"
    SEQ = "seq"
    RECORD = "record"
    CALLABLE = "callable"


def deref(value: Any) -> Any:
    """Strip indirection layers so callers see the underlying value.

    Weak references are followed; a dead reference becomes None.
    """
    while isinstance(value, weakref.ReferenceType):
        value = value()
    return value


def _is_namedtuple(value: Any) -> bool:
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def kind_of(value: Any) -> ValueKind:
    """Classify a (dereferenced) value. Every object maps to exactly one kind."""
    value = deref(value)
    if value is None or value is MISSING:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, (str, bytes, bytearray)):
        return ValueKind.STR
    if isinstance(value, Mapping) or _is_namedtuple(value):
        return ValueKind.RECORD
    if isinstance(value, (Sequence, Set, MappingView, Iterator)):
        return ValueKind.SEQ
    if inspect.isroutine(value) or isinstance(value, functools.partial):
        return ValueKind.CALLABLE
    return ValueKind.RECORD


def iterate(value: Any) -> Iterator[Any]:
    """Iterate the elements of a SEQ value in their original order."""
    return iter(deref(value))


def is_falsy(value: Any) -> bool:
    """Section falsiness: absent, null, ``False``, empty string, empty sequence.

    Zero and empty records are *not* falsy; a section over them renders once.
    Iterators have no length and are never falsy here; an exhausted one
    simply yields no items. Checking never consumes an iterator.
    """
    value = deref(value)
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return True
    if kind is ValueKind.BOOL:
        return not value
    if kind is ValueKind.STR:
        return len(value) == 0
    if kind is ValueKind.SEQ:
        return isinstance(value, Sized) and len(value) == 0
    return False


def is_truthy(value: Any) -> bool:
    """Truthiness of an atomic condition operand.

    True unless the value is unresolved/null, ``False`` or an empty string.
    """
    value = deref(value)
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return False
    if kind is ValueKind.BOOL:
        return bool(value)
    if kind is ValueKind.STR:
        return len(value) > 0
    return True


def _format_float(value: float) -> str:
    text = repr(value)
    if text.endswith(".0"):
        return text[:-2]
    return text


def stringify(value: Any) -> str:
    """Render a value as output text."""
    value = deref(value)
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return ""
    if kind is ValueKind.BOOL:
        return "true" if value else "false"
    if kind is ValueKind.FLOAT:
        return _format_float(value)
    if kind is ValueKind.STR:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", errors="replace")
        return value
    if kind is ValueKind.SEQ:
        return "[" + " ".join(stringify(item) for item in iterate(value)) + "]"
    return str(value)


def to_int(value: Any) -> int:
    """Coerce a value to an integer.

    Raises:
        ValueError: If the value has no integer interpretation
    """
    value = deref(value)
    kind = kind_of(value)
    if kind is ValueKind.BOOL or kind is ValueKind.INT:
        return int(value)
    if kind is ValueKind.FLOAT:
        if not value.is_integer():
            raise ValueError(f"{value!r} is not integral")
        return int(value)
    if kind is ValueKind.STR:
        return int(stringify(value).strip())
    raise ValueError(f"cannot convert {type(value).__name__} to int")


def accepts_no_arguments(func: Callable[..., Any]) -> bool:
    """True if ``func`` can be called with no arguments."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Some builtins carry no signature; let the call decide
        return True
    return all(
        param.default is not param.empty
        or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
        for param in signature.parameters.values()
    )


def call_zero_arg(func: Callable[..., Any]) -> Any:
    """Invoke a zero-argument callable for its value.

    Returns MISSING when the callable needs arguments. An exception raised by
    the callable yields None: the member exists, it just produced no value.
    """
    if not accepts_no_arguments(func):
        return MISSING
    try:
        return func()
    except Exception as e:
        logger.debug("Call to %r failed during lookup: %s", func, e)
        return None


def resolve_member(record: Any, name: str) -> Any:
    """Look up ``name`` on a RECORD value.

    Resolution order:
    - Mappings: key lookup only. Dict methods such as ``items`` or ``keys``
      are container API, not template data, and never shadow keys.
    - Named tuples, dataclasses and other objects: a zero-argument method
      named ``name`` is invoked and its result returned; otherwise the
      attribute value is returned.

    Found values that are themselves callables are invoked with no arguments.
    Names starting with ``_`` are never resolved.

    Returns:
        The member value, or MISSING if the record has no such member
    """
    if not name or name.startswith("_"):
        return MISSING
    record = deref(record)
    try:
        if isinstance(record, Mapping):
            try:
                value = record[name]
            except KeyError:
                return MISSING
        else:
            value = getattr(record, name, MISSING)
            if value is MISSING:
                return MISSING
    except RecursionError:
        raise
    except Exception as e:
        logger.debug("Member %r of %s could not be read: %s", name, type(record).__name__, e)
        return MISSING

    if kind_of(value) is ValueKind.CALLABLE:
        return call_zero_arg(value)
    return value


# Comparison dispatch for condition operands
_COMPARATORS: dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def compare(op: str, left: Any, right: Any) -> bool:
    """Compare two operand values.

    Unresolved operands compare as None. Type mismatches (``"a" < 1``) and
    exceptions from user-defined comparison methods yield False.
    """
    left = None if left is MISSING else deref(left)
    right = None if right is MISSING else deref(right)
    try:
        return bool(_COMPARATORS[op](left, right))
    except Exception as e:
        logger.debug("Comparison %r %s %r failed: %s", left, op, right, e)
        return False
