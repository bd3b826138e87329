"""Markdown body checks: MDX component tags and ``{expression}`` braces."""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass

from markdown_it import MarkdownIt
from markdown_it.token import Token

from docedit.parser.frontmatter import split_lines

# Capitalised JSX component tag: <Name ...>, </Name>, <Name ... />.
# Lower-case HTML is left to CommonMark, which accepts unbalanced markup.
_TAG_RE = re.compile(r"<(/)?([A-Z][\w.]*)((?:\s[^<>]*?)?)(/)?>", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"(`+)(?!`).*?(?<!`)\1")
_CODE_TOKENS = ("fence", "code_block")


class MarkupError(Exception):
    """Raised for malformed embedded markup.  Positions are 1-based."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


@dataclass
class _Open:
    name: str
    offset: int


class MarkupChecker:
    """Checks a Markdown body for balanced MDX fragments.

    Code blocks and inline code spans are masked out before scanning, so
    examples inside them never count.
    """

    def __init__(self, *, mdx: bool = True) -> None:
        self._md = MarkdownIt("commonmark", {"html": True})
        self._mdx = mdx

    def check(self, body: str, line_offset: int = 0) -> None:
        """Raise :class:`MarkupError` for the first problem in *body*.

        *line_offset* is the number of document lines preceding the body.
        """
        tokens = self._md.parse(body)
        if not self._mdx:
            return

        masked = self._mask(body, tokens)
        line_starts = [0] + [i + 1 for i, ch in enumerate(masked) if ch == "\n"]

        def position(offset: int) -> tuple[int, int]:
            line = bisect_right(line_starts, offset) - 1
            return line + 1 + line_offset, offset - line_starts[line] + 1

        tags: list[_Open] = []
        braces: list[int] = []
        i = 0
        while i < len(masked):
            ch = masked[i]
            if ch == "\\":
                i += 2
                continue
            if ch == "{":
                braces.append(i)
            elif ch == "}":
                if not braces:
                    raise MarkupError("Unexpected closing brace '}'", *position(i))
                braces.pop()
            elif ch == "<" and not braces:
                match = _TAG_RE.match(masked, i)
                if match is not None:
                    closing, name, _attrs, self_closing = match.groups()
                    if closing:
                        if not tags:
                            raise MarkupError(
                                f"Unexpected closing tag </{name}>", *position(i)
                            )
                        opened = tags.pop()
                        if opened.name != name:
                            line, _ = position(opened.offset)
                            raise MarkupError(
                                f"Expected closing tag </{opened.name}> "
                                f"(opened on line {line}) but found </{name}>",
                                *position(i),
                            )
                    elif not self_closing:
                        tags.append(_Open(name=name, offset=i))
                    i = match.end()
                    continue
            i += 1

        pending: list[tuple[int, str]] = [
            (b, "Unclosed expression: '{' is never closed") for b in braces
        ]
        pending.extend(
            (t.offset, f"Unclosed component <{t.name}>: expected </{t.name}>") for t in tags
        )
        if pending:
            offset, message = min(pending)
            raise MarkupError(message, *position(offset))

    @staticmethod
    def _mask(body: str, tokens: list[Token]) -> str:
        """Blank out code blocks and inline code, keeping offsets intact."""
        lines = split_lines(body)
        code_lines: set[int] = set()
        for token in tokens:
            if token.type in _CODE_TOKENS and token.map:
                code_lines.update(range(token.map[0], token.map[1]))

        masked: list[str] = []
        for index, line in enumerate(lines):
            if index in code_lines:
                masked.append(_blank(line))
            else:
                masked.append(_INLINE_CODE_RE.sub(lambda m: _blank(m.group(0)), line))
        return "".join(masked)


def _blank(text: str) -> str:
    return "".join(ch if ch == "\n" else " " for ch in text)

