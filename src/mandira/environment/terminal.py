"""Terminal colour helpers for Mandira diagnostics.

ANSI colouring with TTY detection. Honours ``NO_COLOR`` (https://no-color.org/)
and ``FORCE_COLOR``, which wins over ``NO_COLOR``.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "bright_red": "\033[91m",
    "bright_blue": "\033[94m",
}

ColorName = Literal["reset", "bold", "dim", "red", "yellow", "cyan", "bright_red", "bright_blue"]

_ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _should_use_colors() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stderr.isatty()


_USE_COLORS = _should_use_colors()


def supports_color() -> bool:
    """True if diagnostics should be coloured."""
    return _USE_COLORS


def set_color_enabled(enabled: bool) -> None:
    """Force colouring on or off (used by the CLI ``--no-color`` flag)."""
    global _USE_COLORS
    _USE_COLORS = enabled


def colorize(text: str, *colors: ColorName) -> str:
    """Wrap ``text`` in ANSI codes when colours are enabled.

    Example:
        >>> colorize("Error", "red", "bold")
        '\\033[31m\\033[1mError\\033[0m'  # if colours supported
    """
    if not _USE_COLORS or not colors:
        return text
    prefix = "".join(_COLORS[color] for color in colors)
    return f"{prefix}{text}{_COLORS['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI escape sequences."""
    return _ANSI_ESCAPE.sub("", text)


def error_code(code: str) -> str:
    return colorize(code, "bright_red", "bold")


def location(text: str) -> str:
    return colorize(text, "cyan")


def hint(text: str) -> str:
    return colorize(text, "yellow", "bold")


def dim_text(text: str) -> str:
    return colorize(text, "dim")


def format_source_line(lineno: int, content: str, *, is_error: bool = False) -> str:
    """Format one numbered source line; the error line is marked with ``>``."""
    if is_error:
        return f"{colorize(f'>{lineno:>3}', 'bright_red', 'bold')} {dim_text('|')} {content}"
    return f"{dim_text(f' {lineno:>3} |')} {content}"


def format_error_header(code: str | None, message: str) -> str:
    if code:
        return f"{error_code(code)}: {message}"
    return message
