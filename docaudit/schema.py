"""
Schema definitions for the in-memory document model.

Schemas are data: they declare field names, shapes and scalar types. They are
loaded from TOML and used to build `Document` snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .model import Shape


ScalarType = Literal["string", "integer", "double", "boolean", "date"]
SCALAR_TYPES = frozenset({"string", "integer", "double", "boolean", "date"})


@dataclass(frozen=True)
class FieldDef:
    name: str
    shape: Shape = Shape.SCALAR
    type: ScalarType = "string"  # item type for scalar lists
    fields: tuple["FieldDef", ...] = field(default_factory=tuple)  # records only

    def child(self, name: str) -> "FieldDef | None":
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(frozen=True)
class SchemaDef:
    name: str
    prefix: str | None = None
    fields: tuple[FieldDef, ...] = field(default_factory=tuple)

    def qualified_name(self, field_name: str) -> str:
        """Top-level property name, e.g. "dc:title"."""
        if self.prefix:
            return f"{self.prefix}:{field_name}"
        return field_name


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_field(raw: dict[str, Any], where: str) -> FieldDef:
    name = str(raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{where}: field name is required")

    shape_str = str(raw.get("shape", Shape.SCALAR.value)).strip().lower()
    try:
        shape = Shape(shape_str)
    except ValueError:
        raise ValueError(f"{where}.{name}: unknown shape '{shape_str}'") from None

    type_str = str(raw.get("type", "string")).strip().lower()
    if type_str not in SCALAR_TYPES:
        raise ValueError(f"{where}.{name}: unknown type '{type_str}'")

    children: tuple[FieldDef, ...] = ()
    if shape is Shape.RECORD:
        raw_children = raw.get("fields", [])
        if not isinstance(raw_children, list) or not raw_children:
            raise ValueError(f"{where}.{name}: record fields must declare sub-fields")
        children = tuple(
            _parse_field(_coerce_dict(c), f"{where}.{name}") for c in raw_children
        )

    return FieldDef(name=name, shape=shape, type=type_str, fields=children)  # type: ignore[arg-type]


def parse_schemas(data: dict[str, Any]) -> list[SchemaDef]:
    """Build schema definitions from a parsed TOML document."""
    schemas: list[SchemaDef] = []
    seen: set[str] = set()
    for raw in data.get("schemas", []):
        if not isinstance(raw, dict):
            continue
        name = str(raw.get("name", "")).strip()
        if not name:
            raise ValueError("schema name is required")
        if name in seen:
            raise ValueError(f"duplicate schema: {name}")
        seen.add(name)

        prefix = raw.get("prefix")
        prefix_str = str(prefix).strip() if isinstance(prefix, str) else None

        fields = tuple(
            _parse_field(_coerce_dict(f), name) for f in raw.get("fields", [])
        )
        schemas.append(SchemaDef(name=name, prefix=prefix_str or None, fields=fields))
    return schemas


def load_schemas(path: str | Path) -> list[SchemaDef]:
    """
    Load schema definitions from TOML.

    Example:

        [[schemas]]
        name = "dublincore"
        prefix = "dc"

        [[schemas.fields]]
        name = "title"

        [[schemas.fields]]
        name = "subjects"
        shape = "scalar_list"

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the TOML is malformed or declares an invalid field
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse schema TOML: {e}") from e
    return parse_schemas(data)
