"""Content validation: front matter + Markdown body with MDX fragments."""

from __future__ import annotations

import asyncio
import logging

from docedit.models.errors import ValidationResult
from docedit.parser.frontmatter import FrontmatterError, FrontmatterParser
from docedit.parser.markup import MarkupChecker, MarkupError

logger = logging.getLogger("docedit.parser")


class ContentValidator:
    """Parses candidate content and reports the first syntax error found.

    Stateless; one instance may be shared by every session.  ``validate``
    never raises, parse failures are captured in the result.
    """

    def __init__(self, *, mdx: bool = True) -> None:
        self._frontmatter = FrontmatterParser()
        self._markup = MarkupChecker(mdx=mdx)

    async def validate(self, content: str) -> ValidationResult:
        return await asyncio.to_thread(self.validate_sync, content)

    def validate_sync(self, content: str) -> ValidationResult:
        """Blocking variant of :meth:`validate`."""
        try:
            document = self._frontmatter.parse(content)
            self._markup.check(document.body, line_offset=document.body_offset)
        except FrontmatterError as exc:
            return ValidationResult.failure(exc.message, line=exc.line, column=exc.column)
        except MarkupError as exc:
            return ValidationResult.failure(exc.message, line=exc.line, column=exc.column)
        except Exception as exc:  # parser bugs must not escape to the editor
            logger.exception("Unexpected error while validating content")
            return ValidationResult.failure(str(exc) or "Invalid document syntax")
        return ValidationResult.ok()
