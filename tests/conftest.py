"""Shared test fixtures for docedit."""

from __future__ import annotations

from pathlib import Path

import pytest

from docedit.adapters.split import SplitAdapter
from docedit.models.document import EditMetadata
from docedit.preview.backend import MarkdownPreviewBackend
from docedit.service.session_controller import EditSessionController
from docedit.storage.gateway import PersistenceGateway

SAMPLE_DOCUMENT = """\
---
title: Getting started
tags:
  - intro
---

# Getting started

<Callout type="info">
Install the package first.
</Callout>

Inline `{code}` is fine.
"""


@pytest.fixture
def doc_path(tmp_path: Path) -> Path:
    """An existing MDX document holding SAMPLE_DOCUMENT."""
    path = tmp_path / "getting-started.mdx"
    path.write_text(SAMPLE_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def gateway() -> PersistenceGateway:
    return PersistenceGateway()


@pytest.fixture
def controller(gateway: PersistenceGateway) -> EditSessionController:
    """Controller with the split adapter and a near-zero preview debounce."""
    return EditSessionController(
        gateway,
        SplitAdapter(),
        preview_backend=MarkdownPreviewBackend(),
        debounce_seconds=0.01,
    )


@pytest.fixture
def metadata(gateway: PersistenceGateway, doc_path: Path) -> EditMetadata:
    """Validated edit metadata for doc_path, as the page loader would attach it."""
    return EditMetadata(
        resource_handle=gateway.resolve(str(doc_path)),
        endpoint="/api/__docedit/edit",
    )
