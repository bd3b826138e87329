"""Front-matter splitting and YAML parsing with document-level positions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import MarkedYAMLError, YAMLError

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

MAX_DOCUMENT_SIZE = 5_000_000  # 5M characters
_MAX_DEPTH = 20

_FENCE = "---"
_CLOSING_FENCES = ("---", "...")
_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping line ends.

    ``str.splitlines`` also breaks on U+2028 and form feeds; markdown-it
    line maps do not.
    """
    return _LINE_RE.findall(text)


class FrontmatterError(Exception):
    """Raised when the front-matter block cannot be parsed.

    ``line`` and ``column`` are 1-based document coordinates, when known.
    """

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


@dataclass
class Document:
    """A document split into its front matter and body."""

    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    # 0-based index of the first body line in the original document
    body_offset: int = 0
    has_frontmatter: bool = False


class FrontmatterParser:
    """Splits ``---`` fenced YAML front matter off a Markdown document.

    Uses ruamel.yaml, which reports line/column on parse errors; positions
    are shifted so they refer to the whole document, not the YAML block.
    """

    def __init__(self) -> None:
        self._yaml = YAML(typ="rt")
        # Reject deeply nested structures (mitigates stack-based DoS).
        self._yaml.max_depth = _MAX_DEPTH

    def parse(self, content: str) -> Document:
        if len(content) > MAX_DOCUMENT_SIZE:
            raise FrontmatterError(
                f"Document exceeds maximum size "
                f"({len(content):,} chars > {MAX_DOCUMENT_SIZE:,} limit)"
            )

        lines = split_lines(content.lstrip("\ufeff"))
        if not lines or lines[0].rstrip() != _FENCE:
            return Document(body=content)

        closing = next(
            (i for i in range(1, len(lines)) if lines[i].rstrip() in _CLOSING_FENCES),
            None,
        )
        if closing is None:
            raise FrontmatterError(
                "Unterminated front matter: the '---' fence opened on line 1 is never closed",
                line=1,
                column=1,
            )

        block = "".join(lines[1:closing])
        try:
            data = self._yaml.load(block)
        except MarkedYAMLError as exc:
            mark = exc.problem_mark or exc.context_mark
            line = mark.line + 2 if mark is not None else 2  # fence line + 1-based
            column = mark.column + 1 if mark is not None else None
            problem = exc.problem or exc.context or "invalid YAML"
            raise FrontmatterError(f"Invalid front matter: {problem}", line, column) from None
        except YAMLError as exc:
            raise FrontmatterError(f"Invalid front matter: {exc}", line=2) from None

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise FrontmatterError("Front matter must be a mapping of keys to values", 2, 1)

        return Document(
            frontmatter=_to_plain_value(data),
            body="".join(lines[closing + 1 :]),
            body_offset=closing + 1,
            has_frontmatter=True,
        )


def _to_plain_value(data: Any) -> Any:
    """Convert ruamel.yaml CommentedMap/Seq to plain Python dict/list."""
    if isinstance(data, (CommentedMap, dict)):
        return {str(k): _to_plain_value(v) for k, v in data.items()}
    if isinstance(data, (CommentedSeq, list)):
        return [_to_plain_value(item) for item in data]
    return data
