"""
Property diff engine.

Walks the dirty properties of an "after" document, pairs each with its
counterpart in the "before" document, and emits one change descriptor per
leaf-level modification.

Shapes:
- scalar: one descriptor (old -> new)
- record: recurse into dirty children, nothing for the record itself
- attachment: one descriptor carrying filenames, never the payload
- scalar_list: one descriptor per added element, then one per removed element
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .config import DEFAULT_CONFIG, DiffConfig
from .descriptor import (
    AuditContext,
    ChangeDescriptor,
    build_descriptor,
    format_value,
    normalize_field_name,
)
from .model import DocumentView, PropertyView, Shape
from .sink import AuditSink

logger = logging.getLogger(__name__)


def diff_document(
    context: AuditContext,
    before: DocumentView,
    after: DocumentView,
    config: DiffConfig = DEFAULT_CONFIG,
) -> list[ChangeDescriptor]:
    """Diff every dirty, non-system top-level property of `after`.

    Ordering: schema order, then property order, then recursive order.

    Raises:
        KeyError: If a dirty property has no counterpart in `before`
    """
    entries: list[ChangeDescriptor] = []

    for schema in after.schemas():
        for prop in after.properties(schema):
            if config.is_excluded(prop.name):
                continue
            if not prop.is_dirty:
                continue
            old_prop = before.property(prop.path)
            entries.extend(diff(context, before, old_prop, prop, config))

    return entries


def process_document(
    context: AuditContext,
    before: DocumentView,
    after: DocumentView,
    sink: AuditSink,
    config: DiffConfig = DEFAULT_CONFIG,
) -> list[ChangeDescriptor]:
    """Diff a document and hand the batch to `sink` in one call.

    The sink is not called when nothing changed.
    """
    entries = diff_document(context, before, after, config)
    if entries:
        sink.add_log_entries(entries)
    logger.debug("doc %s: %d property change(s)", context.doc_id, len(entries))
    return entries


def diff(
    context: AuditContext,
    before: DocumentView,
    old_property: PropertyView,
    new_property: PropertyView,
    config: DiffConfig = DEFAULT_CONFIG,
) -> list[ChangeDescriptor]:
    """Diff one property pair, recursing into records."""
    shape = new_property.shape

    if shape is Shape.SCALAR:
        return [
            build_descriptor(
                context, old_property.path, old_property.value, new_property.value, config
            )
        ]

    if shape is Shape.ATTACHMENT:
        return [
            build_descriptor(
                context,
                old_property.path,
                _blob_filename(old_property.value),
                _blob_filename(new_property.value),
                config,
            )
        ]

    if shape is Shape.RECORD:
        entries: list[ChangeDescriptor] = []
        for child in new_property.dirty_children():
            old_child = before.property(child.path)
            entries.extend(diff(context, before, old_child, child, config))
        return entries

    if shape is Shape.SCALAR_LIST:
        return diff_scalar_list(
            context, old_property.path, old_property.value, new_property.value, config
        )

    raise ValueError(f"Unsupported property shape: {shape!r}")


def diff_scalar_list(
    context: AuditContext,
    field_name: str,
    old_value: Iterable[Any] | None,
    new_value: Iterable[Any] | None,
    config: DiffConfig = DEFAULT_CONFIG,
) -> list[ChangeDescriptor]:
    """Membership delta between two scalar lists.

    Added elements come first, then removed ones. When there is no before
    list every after element counts as added and nothing is removed.
    """
    field_name = normalize_field_name(field_name)
    old_items = _distinct(old_value) if old_value is not None else None
    new_items = _distinct(new_value or ())

    entries: list[ChangeDescriptor] = []

    added = [v for v in new_items if old_items is None or v not in old_items]
    for value in added:
        comment = f"{field_name} : Added {format_value(value, config)}"
        entries.append(build_descriptor(context, field_name, None, value, config, comment=comment))

    if old_items is not None:
        removed = [v for v in old_items if v not in new_items]
        for value in removed:
            comment = f"{field_name} : Removed {format_value(value, config)}"
            entries.append(build_descriptor(context, field_name, value, None, config, comment=comment))

    return entries


def _distinct(values: Iterable[Any]) -> list[Any]:
    """Unique elements, first occurrence order."""
    return list(dict.fromkeys(values))


def _blob_filename(value: Any) -> str | None:
    if value is None:
        return None
    if not hasattr(value, "filename"):
        raise TypeError(f"Attachment value has no filename: {type(value).__name__}")
    return value.filename
