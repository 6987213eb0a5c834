"""
Change descriptors.

A change descriptor is the normalized audit record for one leaf-level
property modification. Identity fields come verbatim from the triggering
context; values are always pre-formatted strings.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .config import DEFAULT_CONFIG, DiffConfig

EVENT_ID = "Property Modification"
CATEGORY = "Document"

# Keys of the extended info carried by every descriptor
FIELD_NAME = "fieldname"
OLD_VALUE = "oldValue"
NEW_VALUE = "newValue"


@dataclass(frozen=True)
class AuditContext:
    """Who changed what, and when. Copied into every descriptor."""

    timestamp: datetime
    principal_name: str
    doc_id: str
    doc_lifecycle: str | None = None
    repository_id: str | None = None


@dataclass(frozen=True)
class ChangeDescriptor:
    """A single property modification entry."""

    timestamp: datetime
    field_name: str
    old_value: str
    new_value: str
    comment: str

    principal_name: str
    doc_id: str
    doc_lifecycle: str | None = None
    repository_id: str | None = None

    event_id: str = field(default=EVENT_ID)
    category: str = field(default=CATEGORY)

    @property
    def extended(self) -> dict[str, str]:
        return {
            FIELD_NAME: self.field_name,
            OLD_VALUE: self.old_value,
            NEW_VALUE: self.new_value,
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "category": self.category,
            "doc_id": self.doc_id,
            "doc_lifecycle": self.doc_lifecycle,
            "principal_name": self.principal_name,
            "repository_id": self.repository_id,
            "comment": self.comment,
            "extended": self.extended,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChangeDescriptor":
        """Reconstruct from JSON dict."""
        extended = data.get("extended", {})
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            field_name=extended[FIELD_NAME],
            old_value=extended[OLD_VALUE],
            new_value=extended[NEW_VALUE],
            comment=data.get("comment", ""),
            principal_name=data["principal_name"],
            doc_id=data["doc_id"],
            doc_lifecycle=data.get("doc_lifecycle"),
            repository_id=data.get("repository_id"),
            event_id=data.get("event_id", EVENT_ID),
            category=data.get("category", CATEGORY),
        )


def normalize_field_name(field_name: str) -> str:
    """Strip one leading slash."""
    if field_name.startswith("/"):
        return field_name[1:]
    return field_name


def format_value(value: Any, config: DiffConfig = DEFAULT_CONFIG) -> str:
    """Render a property value for the audit trail.

    None becomes the empty marker, dates use the configured pattern, and
    everything else falls back to str().
    """
    if value is None:
        return config.empty_value
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.strftime(config.date_format)
    if isinstance(value, date):
        return value.strftime(config.date_format)
    return str(value)


def build_descriptor(
    context: AuditContext,
    field_name: str,
    old_value: Any,
    new_value: Any,
    config: DiffConfig = DEFAULT_CONFIG,
    comment: str | None = None,
) -> ChangeDescriptor:
    """
    Build a descriptor for one change.

    Args:
        context: Triggering event identity
        field_name: Property path, possibly with a leading slash
        old_value: Raw value before the change (None if absent)
        new_value: Raw value after the change (None if absent)
        config: Formatting settings
        comment: Overrides the default "<path> : <old> -> <new>" summary
    """
    field_name = normalize_field_name(field_name)
    formatted_old = format_value(old_value, config)
    formatted_new = format_value(new_value, config)
    if comment is None:
        comment = f"{field_name} : {formatted_old} -> {formatted_new}"

    return ChangeDescriptor(
        timestamp=context.timestamp,
        field_name=field_name,
        old_value=formatted_old,
        new_value=formatted_new,
        comment=comment,
        principal_name=context.principal_name,
        doc_id=context.doc_id,
        doc_lifecycle=context.doc_lifecycle,
        repository_id=context.repository_id,
    )
