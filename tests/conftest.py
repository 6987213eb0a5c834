"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from docaudit.descriptor import AuditContext
from docaudit.document import Document, track_changes
from docaudit.schema import SchemaDef, load_schemas

DOC_ID = "doc-0001"


@pytest.fixture
def fixtures_path() -> Path:
    """Path to the test fixture files."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def schemas(fixtures_path: Path) -> list[SchemaDef]:
    """dublincore, file and test schemas."""
    return load_schemas(fixtures_path / "schemas.toml")


@pytest.fixture
def context() -> AuditContext:
    return AuditContext(
        timestamp=datetime(2016, 3, 17, 12, 0, tzinfo=timezone.utc),
        principal_name="Administrator",
        doc_id=DOC_ID,
        doc_lifecycle="project",
        repository_id="test",
    )


@pytest.fixture
def make_doc(schemas: list[SchemaDef]) -> Callable[..., Document]:
    """Build a document snapshot from top-level values."""

    def _make(values: dict[str, Any] | None = None, before: Document | None = None) -> Document:
        return Document.from_values(
            schemas,
            values,
            doc_id=DOC_ID,
            lifecycle_state="project",
            repository_name="test",
            before=before,
        )

    return _make


@pytest.fixture
def modify(make_doc: Callable[..., Document]) -> Callable[..., tuple[Document, Document]]:
    """Return (before, after) with after's dirty flags tracked against before."""

    def _modify(
        before_values: dict[str, Any] | None, after_values: dict[str, Any] | None
    ) -> tuple[Document, Document]:
        before = make_doc(before_values)
        after = track_changes(before, make_doc(after_values))
        return before, after

    return _modify
