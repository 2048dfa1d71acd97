"""HTML escaping for Mandira output.

Only the five characters significant in HTML text and attribute values are
replaced. Escaping is a single pass through `str.translate()`.
"""

from __future__ import annotations

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&apos;",
    }
)


def html_escape(value: str) -> str:
    """Escape ``& < > " '`` in ``value``.

    Example:
        >>> html_escape('5 > 2 & "ok"')
        '5 &gt; 2 &amp; &quot;ok&quot;'
    """
    return value.translate(_ESCAPE_TABLE)
