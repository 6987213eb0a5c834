"""
Property model consumed by the diff engine.

The engine never inspects runtime value types to decide how to diff a field.
Each property view carries a closed shape tag set by whatever adapter exposes
the document (see `docaudit.document` for the in-memory one).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Protocol, runtime_checkable


class Shape(str, Enum):
    """Field shapes.

    - SCALAR: a single value (string, number, boolean, date)
    - RECORD: a nested group of named sub-fields
    - SCALAR_LIST: an unordered collection of scalars
    - ATTACHMENT: a binary blob with metadata; only its filename is audited
    """

    SCALAR = "scalar"
    RECORD = "record"
    SCALAR_LIST = "scalar_list"
    ATTACHMENT = "attachment"


@dataclass(frozen=True)
class Blob:
    """Reference to a binary attachment."""

    filename: str | None
    mime_type: str | None = None
    length: int | None = None
    digest: str | None = None


@runtime_checkable
class PropertyView(Protocol):
    """One field (or sub-field) of a document at a point in time."""

    @property
    def name(self) -> str:
        ...

    @property
    def path(self) -> str:
        """Slash-delimited location, e.g. "test:complex/string"."""
        ...

    @property
    def shape(self) -> Shape:
        ...

    @property
    def value(self) -> Any:
        ...

    @property
    def is_dirty(self) -> bool:
        ...

    def dirty_children(self) -> Iterator["PropertyView"]:
        """Children changed since the before snapshot (records only)."""
        ...


@runtime_checkable
class DocumentView(Protocol):
    """Read-only view of one document snapshot."""

    def schemas(self) -> Iterable[str]:
        ...

    def properties(self, schema: str) -> Iterable[PropertyView]:
        ...

    def property(self, path: str) -> PropertyView:
        """
        Fetch a property by path.

        Raises:
            KeyError: If no property exists at `path`
        """
        ...
