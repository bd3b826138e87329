"""docedit: in-place editing of Markdown/MDX documents with live preview."""

__version__ = "0.1.0"
