"""
Host-facing listener.

Wires the diff engine to an event stream: on each document event, resolve a
sink, load the before snapshot, diff, and submit the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Protocol

from .config import DEFAULT_CONFIG, DiffConfig
from .descriptor import AuditContext, ChangeDescriptor
from .document import Document
from .engine import process_document
from .model import DocumentView
from .sink import AuditSink

logger = logging.getLogger(__name__)


class SnapshotLoader(Protocol):
    """Supplies the last persisted version of a document."""

    def load_before(self, doc_id: str) -> DocumentView:
        ...


class SnapshotStore:
    """In-memory versioning store keyed by document id."""

    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}

    def save(self, document: Document) -> None:
        if not document.doc_id:
            raise ValueError("Cannot store a document without doc_id")
        self._docs[document.doc_id] = document

    def load_before(self, doc_id: str) -> Document:
        try:
            return self._docs[doc_id]
        except KeyError:
            raise KeyError(f"No stored version of document: {doc_id}") from None


@dataclass(frozen=True)
class DocumentEvent:
    """A document event as delivered by the host."""

    name: str
    principal_name: str
    document: DocumentView | None = None
    doc_id: str = ""
    lifecycle_state: str | None = None
    repository_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def for_document(
        cls,
        name: str,
        document: Document,
        principal_name: str,
        timestamp: datetime | None = None,
    ) -> "DocumentEvent":
        return cls(
            name=name,
            principal_name=principal_name,
            document=document,
            doc_id=document.doc_id,
            lifecycle_state=document.lifecycle_state,
            repository_id=document.repository_name,
            timestamp=timestamp or datetime.now(timezone.utc),
        )

    def audit_context(self) -> AuditContext:
        return AuditContext(
            timestamp=self.timestamp,
            principal_name=self.principal_name,
            doc_id=self.doc_id,
            doc_lifecycle=self.lifecycle_state,
            repository_id=self.repository_id,
        )


class AuditListener:
    """Turns document modification events into property audit entries."""

    def __init__(
        self,
        loader: SnapshotLoader,
        sink_provider: Callable[[], AuditSink | None],
        config: DiffConfig = DEFAULT_CONFIG,
    ):
        self.loader = loader
        self.sink_provider = sink_provider
        self.config = config

    def handle_event(self, event: DocumentEvent) -> list[ChangeDescriptor]:
        """
        Process one event.

        Events without a document are ignored. A missing sink is logged and
        the event is skipped. Lookup failures propagate.
        """
        if event.document is None:
            return []

        sink = self.sink_provider()
        if sink is None:
            logger.error("No audit log sink is available")
            return []

        before = self.loader.load_before(event.doc_id)
        return process_document(
            event.audit_context(),
            before,
            event.document,
            sink,
            self.config,
        )
