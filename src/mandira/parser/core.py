"""Template parser for Mandira.

Scans template text for ``{{ }}`` tags and builds an immutable node tree.

Tags are classified by the first character of their trimmed content:

    {{! comment }}          discarded
    {{#name}} ... {{/name}} section
    {{?if expr}} ... {{?else}} ... {{/if}}
    {{{ expr }}}            raw variable
    {{ expr }}              escaped variable

Open sections are kept on an explicit stack rather than recursing per
nesting level, so deep templates parse without touching the recursion limit.

Any structural problem raises ParseError annotated with the template name,
filename and source. There is no partial result.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mandira.environment.exceptions import ErrorCode, TemplateSyntaxError
from mandira.nodes import Conditional, Node, Section, Template, Text, Variable
from mandira.parser.errors import ParseError
from mandira.parser.expressions import parse_condition_tag, parse_var_tag

OPEN_TAG = "{{"
CLOSE_TAG = "}}"
RAW_CLOSE_TAG = "}}}"


@dataclass(slots=True)
class _OpenSection:
    """A section whose closing tag has not been seen yet."""

    name: str
    lineno: int
    col_offset: int
    condition: Conditional | None = None
    body: list[Node] = field(default_factory=list)
    else_body: list[Node] = field(default_factory=list)
    in_else: bool = False

    @property
    def nodes(self) -> list[Node]:
        return self.else_body if self.in_else else self.body

    def close(self) -> Section:
        return Section(
            lineno=self.lineno,
            col_offset=self.col_offset,
            name=self.name,
            body=tuple(self.body),
            else_body=tuple(self.else_body),
            condition=self.condition,
        )


class Parser:
    """Parse Mandira template source into a `Template` node.

    Example:
        >>> Parser("Hello {{name}}!").parse()
        Template(lineno=1, col_offset=0, body=(Text(...), Variable(...), Text(...)), name=None)
    """

    __slots__ = (
        "_body",
        "_filename",
        "_lineno",
        "_line_start",
        "_name",
        "_pos",
        "_source",
        "_stack",
    )

    def __init__(
        self,
        source: str,
        name: str | None = None,
        filename: str | None = None,
    ):
        self._source = source
        self._name = name
        self._filename = filename
        self._pos = 0
        self._lineno = 1
        self._line_start = 0
        self._body: list[Node] = []
        self._stack: list[_OpenSection] = []

    def parse(self) -> Template:
        """Parse the whole source.

        Raises:
            ParseError: On any structural or expression error
            TemplateSyntaxError: If tag content cannot be tokenized
        """
        try:
            body = self._parse()
        except TemplateSyntaxError as e:
            raise e.with_template(
                name=self._name,
                filename=self._filename,
                source=self._source,
            ) from None
        return Template(lineno=1, col_offset=0, body=tuple(body), name=self._name)

    # Scanning

    @property
    def _nodes(self) -> list[Node]:
        """Node list that receives the next parsed node."""
        if self._stack:
            return self._stack[-1].nodes
        return self._body

    def _advance_to(self, pos: int) -> None:
        """Move the cursor to ``pos``, keeping line bookkeeping in step."""
        newlines = self._source.count("\n", self._pos, pos)
        if newlines:
            self._lineno += newlines
            self._line_start = self._source.rfind("\n", self._pos, pos) + 1
        self._pos = pos

    def _emit_text(self, end: int) -> None:
        if end > self._pos:
            self._nodes.append(
                Text(
                    lineno=self._lineno,
                    col_offset=self._pos - self._line_start,
                    value=self._source[self._pos : end],
                )
            )
        self._advance_to(end)

    def _parse(self) -> list[Node]:
        source = self._source
        while True:
            start = source.find(OPEN_TAG, self._pos)
            if start == -1:
                self._emit_text(len(source))
                break
            self._emit_text(start)

            lineno = self._lineno
            col_offset = start - self._line_start
            content_start = start + len(OPEN_TAG)
            raw = source.startswith("{", content_start)
            close = RAW_CLOSE_TAG if raw else CLOSE_TAG

            end = source.find(close, content_start)
            if end == -1:
                raise ParseError(
                    "unmatched open tag",
                    lineno,
                    col_offset=col_offset,
                    code=ErrorCode.UNMATCHED_OPEN_TAG,
                )
            content = source[content_start + 1 if raw else content_start : end]
            self._advance_to(end + len(close))

            try:
                if raw:
                    self._parse_variable(content.strip(), lineno, col_offset, raw=True)
                else:
                    self._parse_tag(content.strip(), lineno, col_offset)
            except TemplateSyntaxError as e:
                # Expression errors carry offsets into the tag content
                e.col_offset = col_offset
                raise

        if self._stack:
            section = self._stack[-1]
            raise ParseError(
                f"{section.name} has no closing tag",
                section.lineno,
                col_offset=section.col_offset,
                code=ErrorCode.UNCLOSED_SECTION,
            )
        return self._body

    def _swallow_newline(self) -> None:
        """Skip one newline (LF or CRLF) directly after a section open tag."""
        if self._source.startswith("\n", self._pos):
            self._advance_to(self._pos + 1)
        elif self._source.startswith("\r\n", self._pos):
            self._advance_to(self._pos + 2)

    # Tag handling

    def _parse_tag(self, tag: str, lineno: int, col_offset: int) -> None:
        if not tag:
            raise ParseError("empty tag", lineno, col_offset=col_offset, code=ErrorCode.EMPTY_TAG)

        handler = self._TAG_HANDLERS.get(tag[0])
        if handler is None:
            self._parse_variable(tag, lineno, col_offset, raw=False)
        else:
            handler(self, tag, lineno, col_offset)

    def _parse_comment(self, tag: str, lineno: int, col_offset: int) -> None:
        pass

    def _parse_section_open(self, tag: str, lineno: int, col_offset: int) -> None:
        name = tag[1:].strip()
        if not name:
            raise ParseError(
                "section tag requires a name",
                lineno,
                col_offset=col_offset,
                code=ErrorCode.EMPTY_TAG,
            )
        self._swallow_newline()
        self._stack.append(_OpenSection(name=name, lineno=lineno, col_offset=col_offset))

    def _parse_conditional_tag(self, tag: str, lineno: int, col_offset: int) -> None:
        if tag == "?else":
            self._parse_else(lineno, col_offset)
            return

        if tag[:3] == "?if" and (len(tag) == 3 or tag[3].isspace()):
            condition = parse_condition_tag(tag[3:], lineno)
            self._stack.append(
                _OpenSection(
                    name="if",
                    lineno=lineno,
                    col_offset=col_offset,
                    condition=condition,
                )
            )
            return

        raise ParseError(
            f"invalid conditional tag: {tag}",
            lineno,
            col_offset=col_offset,
            code=ErrorCode.INVALID_CONDITIONAL,
        )

    def _parse_else(self, lineno: int, col_offset: int) -> None:
        if not self._stack or self._stack[-1].condition is None:
            raise ParseError(
                "?else outside of an ?if section",
                lineno,
                col_offset=col_offset,
                code=ErrorCode.INVALID_CONDITIONAL,
            )
        section = self._stack[-1]
        if section.in_else:
            raise ParseError(
                "duplicate ?else in ?if section",
                lineno,
                col_offset=col_offset,
                code=ErrorCode.INVALID_CONDITIONAL,
            )
        section.in_else = True

    def _parse_section_close(self, tag: str, lineno: int, col_offset: int) -> None:
        name = tag[1:].strip()
        if not self._stack:
            raise ParseError(
                "unmatched close tag",
                lineno,
                col_offset=col_offset,
                code=ErrorCode.UNMATCHED_CLOSE_TAG,
            )
        if name != self._stack[-1].name:
            raise ParseError(
                f"interleaved closing tag: {name}",
                lineno,
                col_offset=col_offset,
                code=ErrorCode.INTERLEAVED_CLOSE_TAG,
            )
        section = self._stack.pop()
        self._nodes.append(section.close())

    def _parse_braced(self, tag: str, lineno: int, col_offset: int) -> None:
        # {{ {name} }}: braces inside an ordinary tag also mark raw output
        if len(tag) < 2 or not tag.endswith("}"):
            raise ParseError(
                "unmatched open tag",
                lineno,
                col_offset=col_offset,
                code=ErrorCode.UNMATCHED_OPEN_TAG,
            )
        self._parse_variable(tag[1:-1].strip(), lineno, col_offset, raw=True)

    def _parse_variable(self, tag: str, lineno: int, col_offset: int, *, raw: bool) -> None:
        if not tag:
            raise ParseError("empty tag", lineno, col_offset=col_offset, code=ErrorCode.EMPTY_TAG)
        expr = parse_var_tag(tag, lineno)
        self._nodes.append(Variable(lineno=lineno, col_offset=col_offset, expr=expr, raw=raw))

    _TAG_HANDLERS = {
        "!": _parse_comment,
        "#": _parse_section_open,
        "?": _parse_conditional_tag,
        "/": _parse_section_close,
        "{": _parse_braced,
    }
