"""
Property-level audit trail for document changes.

Compares before/after snapshots of a schema-typed document and emits one
change descriptor per leaf-level property modification.

Components:
- model: property shapes and the read-only views the engine consumes
- descriptor: change descriptors and value formatting
- engine: recursive property diff and batch submission
- document: in-memory snapshots with change tracking
- sink: audit log sinks (in-memory, JSON Lines)
- listener: event wiring for a hosting system
"""

__version__ = "0.1.0"

from .config import DEFAULT_CONFIG, DiffConfig, load_config
from .descriptor import AuditContext, ChangeDescriptor, build_descriptor, format_value
from .document import Document, track_changes
from .engine import diff, diff_document, diff_scalar_list, process_document
from .listener import AuditListener, DocumentEvent, SnapshotStore
from .model import Blob, Shape
from .schema import FieldDef, SchemaDef, load_schemas
from .sink import AuditSink, JsonlAuditLog, MemorySink

__all__ = [
    "AuditContext",
    "AuditListener",
    "AuditSink",
    "Blob",
    "ChangeDescriptor",
    "DEFAULT_CONFIG",
    "DiffConfig",
    "Document",
    "DocumentEvent",
    "FieldDef",
    "JsonlAuditLog",
    "MemorySink",
    "SchemaDef",
    "Shape",
    "SnapshotStore",
    "build_descriptor",
    "diff",
    "diff_document",
    "diff_scalar_list",
    "format_value",
    "load_config",
    "load_schemas",
    "process_document",
    "track_changes",
]
