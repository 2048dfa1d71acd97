"""Exceptions for the Mandira template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Template not found by a loader
├── TemplateSyntaxError       # Tokenizer rejected tag content
│   └── ParseError            # Grammar violation (mandira.parser.errors)
└── TemplateRuntimeError      # Unexpected internal failure while rendering

Missing names, missing filters and failing filters are deliberately *not*
exceptions: the renderer turns them into empty output. Only structural
problems with the template itself are raised.

Example:
    ```
    M-PAR-004: interleaved closing tag: b
      --> page.mnd:3
       |
      1 | <ul>
      2 | {{#a}}{{#b}}
     >3 | {{/a}}
       |
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from mandira.environment import terminal


class ErrorCode(Enum):
    """Searchable error codes for Mandira template errors.

    Format: M-{CATEGORY}-{NUMBER}
    Categories: LEX (tokenizer), PAR (parser), RUN (runtime), TPL (loading)
    """

    # Tokenizer errors (M-LEX-xxx)
    INVALID_TOKEN = "M-LEX-001"

    # Parser errors (M-PAR-xxx)
    UNMATCHED_OPEN_TAG = "M-PAR-001"
    UNCLOSED_SECTION = "M-PAR-002"
    UNMATCHED_CLOSE_TAG = "M-PAR-003"
    INTERLEAVED_CLOSE_TAG = "M-PAR-004"
    INVALID_EXPRESSION = "M-PAR-005"
    INVALID_FILTER = "M-PAR-006"
    EMPTY_TAG = "M-PAR-007"
    INVALID_CONDITIONAL = "M-PAR-008"

    # Runtime errors (M-RUN-xxx)
    RUNTIME_ERROR = "M-RUN-001"

    # Template loading errors (M-TPL-xxx)
    TEMPLATE_NOT_FOUND = "M-TPL-001"

    @property
    def category(self) -> str:
        """Error category ('tokenizer', 'parser', 'runtime' or 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "tokenizer",
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source lines around an error.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for a caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            parts.append(
                terminal.format_source_line(lineno, content, is_error=lineno == self.error_line)
            )
            if lineno == self.error_line and self.column is not None:
                parts.append(f"{terminal.dim_text('     |')} {' ' * self.column}^")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet showing ``context_lines`` either side of the error."""
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all Mandira template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a short, human-readable terminal diagnostic."""
        header = str(self)
        if self.code and self.code.value not in header:
            return terminal.format_error_header(self.code.value, header)
        return header


class TemplateNotFoundError(TemplateError):
    """Template not found by a loader.

    Example:
        >>> loader.get("missing.mnd")
        TemplateNotFoundError: Template 'missing.mnd' not found in: templates/
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Tag content that cannot be tokenized, e.g. a lone ``=`` or ``!``.

    When ``source`` and ``lineno`` are known the compact format includes the
    offending line. Errors from a template parse carry the column of the
    offending tag in ``col_offset``, shown there as a caret. Errors from
    parsing bare tag content carry the offset into that content.
    """

    code: ErrorCode | None = ErrorCode.INVALID_TOKEN

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        *,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.filename = filename
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    @property
    def location(self) -> str:
        location = self.filename or self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
        return location

    def _format_message(self) -> str:
        if self.lineno:
            return f"line {self.lineno}: {self.message}"
        return self.message

    def with_template(
        self,
        *,
        name: str | None,
        filename: str | None,
        source: str | None,
    ) -> TemplateSyntaxError:
        """Return a copy of this error annotated with template identity.

        Expression-level errors are raised before the enclosing template is
        known; the template parser re-raises them through this method.
        """
        return type(self)(
            self.message,
            self.lineno,
            name=name,
            filename=filename,
            source=source,
            col_offset=self.col_offset,
            code=self.code,
        )

    def format_compact(self) -> str:
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  --> {terminal.location(self.location)}",
        ]
        if self.source and self.lineno:
            snippet = build_source_snippet(self.source, self.lineno, column=self.col_offset)
            parts.append(snippet.format())
        return "\n".join(parts)


class TemplateRuntimeError(TemplateError):
    """Unexpected failure while rendering.

    Ordinary data problems never raise; this wraps faults such as exceeding
    the interpreter's recursion limit on pathologically nested sections.

    Attributes:
        message: Error description
        template_name: Name of the template being rendered
        values: Optional mapping of names to values for context
        suggestion: Optional fix suggestion
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        values: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        self.message = message
        self.template_name = template_name
        self.values = values or {}
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]
        if self.template_name:
            parts.append(f"  Location: {terminal.location(self.template_name)}")
        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type(value).__name__})")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Suggestion:')} {self.suggestion}")
        return "\n".join(parts)
