"""Parser error handling for Mandira.

Provides ParseError, raised for grammar violations in template structure
(unmatched or interleaved tags) and in tag expressions (filters, conditions).
"""

from __future__ import annotations

from mandira.environment.exceptions import ErrorCode, TemplateSyntaxError


class ParseError(TemplateSyntaxError):
    """Template or expression grammar violation.

    Carries the line of the offending tag. For a section that is never
    closed, that is the line of its opening tag.

    Example:
        >>> parse("{{#a}}never closed")
        ParseError: line 1: a has no closing tag
    """

    code: ErrorCode | None = ErrorCode.INVALID_EXPRESSION
