"""Built-in filters for Mandira templates.

A filter receives the current value as its first argument. Further
parameters take the literal or looked-up arguments written in the tag, coerced
according to their annotations (``str`` or ``int``; anything else is passed
through unchanged).

Filters never need to guard against bad input: an exception raised inside a
filter makes the whole expression render as empty text.

Example:
    {{ name|index(0)|upper }}
    {{ tags|join(", ") }}
    {{ price|format("%.2f") }}
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence, Sized
from typing import Any

from mandira.values import ValueKind, deref, iterate, kind_of, stringify, to_int

_WORD_START = re.compile(r"(?<!\w)\w")


def _filter_upper(value: Any) -> str:
    """Convert to uppercase."""
    return stringify(value).upper()


def _filter_lower(value: Any) -> str:
    """Convert to lowercase."""
    return stringify(value).lower()


def _filter_title(value: Any) -> str:
    """Uppercase the first letter of every word, leaving the rest alone.

    Unlike `str.title`, ``"hello mcDonald"`` becomes ``"Hello McDonald"``.
    """
    return _WORD_START.sub(lambda m: m.group().upper(), stringify(value))


def _filter_length(value: Any) -> int:
    """Number of items in a sequence or mapping, or characters in a string.

    Any other value has length 0. An iterator is counted by consuming it.
    """
    value = deref(value)
    kind = kind_of(value)
    if kind is ValueKind.SEQ and not isinstance(value, Sized):
        return sum(1 for _ in value)
    if kind is ValueKind.STR or kind is ValueKind.SEQ:
        return len(value)
    if kind is ValueKind.RECORD and isinstance(value, Mapping):
        return len(value)
    return 0


def _filter_index(value: Any, index: int) -> Any:
    """Item at ``index`` of a sequence, or character of a string.

    Out-of-range and negative indexes give an empty string.
    """
    value = deref(value)
    kind = kind_of(value)
    if index < 0:
        return ""
    if kind is ValueKind.STR:
        text = stringify(value)
        return text[index] if index < len(text) else ""
    if kind is ValueKind.SEQ and isinstance(value, Sequence):
        return value[index] if index < len(value) else ""
    return ""


def _filter_format(value: Any, fmt: str) -> str:
    """printf-style formatting: ``{{ n|format("%05d") }}``."""
    return fmt % (deref(value),)


def _filter_date(value: Any, fmt: str) -> str:
    """Format a date, time or datetime with `strftime` directives.

    Values without a ``strftime`` method give an empty string.
    """
    value = deref(value)
    strftime = getattr(value, "strftime", None)
    if strftime is None:
        return ""
    return strftime(fmt)


def _filter_join(value: Any, separator: str) -> str:
    """Join the stringified items of a sequence."""
    value = deref(value)
    if kind_of(value) is not ValueKind.SEQ:
        return ""
    return separator.join(stringify(item) for item in iterate(value))


def _filter_divisibleby(value: Any, divisor: int) -> bool:
    """True if the value divides evenly by ``divisor``."""
    return to_int(value) % divisor == 0


DEFAULT_FILTERS: dict[str, Callable[..., Any]] = {
    "upper": _filter_upper,
    "lower": _filter_lower,
    "title": _filter_title,
    "len": _filter_length,
    "length": _filter_length,
    "index": _filter_index,
    "format": _filter_format,
    "date": _filter_date,
    "join": _filter_join,
    "divisibleby": _filter_divisibleby,
}
