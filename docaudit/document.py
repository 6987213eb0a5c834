"""
In-memory document snapshots with change tracking.

A `Document` exposes the property views the diff engine consumes. Dirtiness
is computed when the after snapshot is built against a before snapshot, so
`track_changes(before, after)` gives the engine exactly what a host's own
change tracking would.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Iterator, Mapping

from .model import Blob, Shape
from .schema import FieldDef, SchemaDef


@dataclass(frozen=True)
class Property:
    """A property of one document snapshot."""

    name: str
    path: str
    definition: FieldDef
    raw: Any = None  # leaf value; unused for records
    dirty: bool = False
    children: tuple["Property", ...] = field(default_factory=tuple)

    @property
    def shape(self) -> Shape:
        return self.definition.shape

    @property
    def value(self) -> Any:
        if self.shape is Shape.RECORD:
            return {c.name: c.value for c in self.children}
        return self.raw

    @property
    def is_dirty(self) -> bool:
        return self.dirty

    def dirty_children(self) -> Iterator["Property"]:
        return (c for c in self.children if c.dirty)

    def walk(self) -> Iterator["Property"]:
        """This property and all descendants, depth first."""
        yield self
        for c in self.children:
            yield from c.walk()


class Document:
    """A document snapshot: schemas, their properties, and identity."""

    def __init__(
        self,
        schema_defs: Iterable[SchemaDef],
        properties: Mapping[str, list[Property]],
        doc_id: str = "",
        lifecycle_state: str | None = None,
        repository_name: str | None = None,
    ):
        self.schema_defs = list(schema_defs)
        self._properties = {k: list(v) for k, v in properties.items()}
        self.doc_id = doc_id
        self.lifecycle_state = lifecycle_state
        self.repository_name = repository_name

        self._index: dict[str, Property] = {}
        for props in self._properties.values():
            for top in props:
                for p in top.walk():
                    self._index[p.path] = p

    # --- DocumentView ---

    def schemas(self) -> list[str]:
        return [s.name for s in self.schema_defs]

    def properties(self, schema: str) -> list[Property]:
        return list(self._properties.get(schema, []))

    def property(self, path: str) -> Property:
        key = path[1:] if path.startswith("/") else path
        try:
            return self._index[key]
        except KeyError:
            raise KeyError(f"No property at path: {path}") from None

    # --- Convenience ---

    def get_value(self, path: str) -> Any:
        return self.property(path).value

    def has_property(self, path: str) -> bool:
        key = path[1:] if path.startswith("/") else path
        return key in self._index

    def dirty_paths(self) -> list[str]:
        """Paths of dirty leaf properties."""
        return [
            p.path
            for p in self._index.values()
            if p.dirty and p.shape is not Shape.RECORD
        ]

    def values(self) -> dict[str, Any]:
        """Top-level values keyed by qualified property name."""
        return {
            top.name: top.value
            for props in self._properties.values()
            for top in props
        }

    @classmethod
    def from_values(
        cls,
        schema_defs: Iterable[SchemaDef],
        values: Mapping[str, Any] | None = None,
        *,
        doc_id: str = "",
        lifecycle_state: str | None = None,
        repository_name: str | None = None,
        before: "Document | None" = None,
    ) -> "Document":
        """
        Build a snapshot from plain values.

        Args:
            schema_defs: Schemas the document carries
            values: Top-level values keyed by qualified name ("dc:title")
            before: When given, properties whose value differs from it are
                marked dirty

        Raises:
            ValueError: If `values` names a property no schema declares, or a
                value cannot be coerced to its declared type
        """
        schema_defs = list(schema_defs)
        values = dict(values or {})

        known = {s.qualified_name(f.name) for s in schema_defs for f in s.fields}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown properties: {', '.join(unknown)}")

        properties: dict[str, list[Property]] = {}
        for schema in schema_defs:
            props = []
            for fdef in schema.fields:
                qname = schema.qualified_name(fdef.name)
                props.append(_build_property(fdef, qname, qname, values.get(qname), before))
            properties[schema.name] = props

        return cls(
            schema_defs,
            properties,
            doc_id=doc_id,
            lifecycle_state=lifecycle_state,
            repository_name=repository_name,
        )


def track_changes(before: Document, after: Document) -> Document:
    """Return `after` with dirty flags set against `before`."""
    return Document.from_values(
        after.schema_defs,
        after.values(),
        doc_id=after.doc_id or before.doc_id,
        lifecycle_state=after.lifecycle_state,
        repository_name=after.repository_name,
        before=before,
    )


def _build_property(
    fdef: FieldDef,
    name: str,
    path: str,
    raw_value: Any,
    before: Document | None,
) -> Property:
    if fdef.shape is Shape.RECORD:
        if raw_value is None:
            raw_value = {}
        if not isinstance(raw_value, Mapping):
            raise ValueError(f"{path}: expected a mapping, got {type(raw_value).__name__}")
        unknown = sorted(set(raw_value) - {c.name for c in fdef.fields})
        if unknown:
            raise ValueError(f"{path}: unknown sub-fields {', '.join(unknown)}")
        children = tuple(
            _build_property(c, c.name, f"{path}/{c.name}", raw_value.get(c.name), before)
            for c in fdef.fields
        )
        return Property(
            name=name,
            path=path,
            definition=fdef,
            dirty=any(c.dirty for c in children),
            children=children,
        )

    value = coerce_value(fdef, raw_value, path)
    dirty = False
    if before is not None:
        old = before.get_value(path) if before.has_property(path) else None
        dirty = old != value
    return Property(name=name, path=path, definition=fdef, raw=value, dirty=dirty)


def coerce_value(fdef: FieldDef, value: Any, path: str = "") -> Any:
    """Coerce a plain value to the representation its field declares."""
    where = path or fdef.name
    if value is None:
        return None

    if fdef.shape is Shape.ATTACHMENT:
        if isinstance(value, Blob):
            return value
        if isinstance(value, str):
            return Blob(filename=value)
        if isinstance(value, Mapping):
            return Blob(
                filename=value.get("filename"),
                mime_type=value.get("mime_type"),
                length=value.get("length"),
                digest=value.get("digest"),
            )
        raise ValueError(f"{where}: cannot use {type(value).__name__} as an attachment")

    if fdef.shape is Shape.SCALAR_LIST:
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            value = [value]
        return tuple(_coerce_scalar(fdef.type, v, where) for v in value)

    return _coerce_scalar(fdef.type, value, where)


def _coerce_scalar(type_name: str, value: Any, where: str) -> Any:
    if value is None:
        return None
    try:
        if type_name == "string":
            return value if isinstance(value, str) else str(value)
        if type_name == "integer":
            return int(value)
        if type_name == "double":
            return float(value)
        if type_name == "boolean":
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in ("true", "yes", "1"):
                    return True
                if lowered in ("false", "no", "0"):
                    return False
                raise ValueError(value)
            return bool(value)
        if type_name == "date":
            if isinstance(value, (date, datetime)):
                return value
            text = str(value).strip()
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text)
    except (TypeError, ValueError):
        raise ValueError(f"{where}: cannot coerce {value!r} to {type_name}") from None
    return value
