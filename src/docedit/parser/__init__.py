"""Document parsing with line fidelity for docedit."""

from docedit.parser.frontmatter import Document, FrontmatterError, FrontmatterParser
from docedit.parser.markup import MarkupChecker, MarkupError
from docedit.parser.validator import ContentValidator

__all__ = [
    "ContentValidator",
    "Document",
    "FrontmatterError",
    "FrontmatterParser",
    "MarkupChecker",
    "MarkupError",
]
