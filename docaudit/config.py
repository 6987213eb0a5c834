"""
Diff configuration.

Holds the system-managed field names that are never audited and the date
pattern used when formatting values. Loaded once and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore


SYSTEM_PROPS = frozenset({
    "dc:created",
    "dc:creator",
    "dc:modified",
    "dc:contributors",
})

DATE_FORMAT = "%m/%d/%Y"
EMPTY_VALUE = "EMPTY"


@dataclass(frozen=True)
class DiffConfig:
    """Immutable settings for one diff pass."""

    excluded_fields: frozenset[str] = field(default_factory=lambda: SYSTEM_PROPS)
    date_format: str = DATE_FORMAT
    empty_value: str = EMPTY_VALUE

    def is_excluded(self, field_name: str) -> bool:
        return field_name in self.excluded_fields


DEFAULT_CONFIG = DiffConfig()


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_config(data: dict[str, Any]) -> DiffConfig:
    """Build a DiffConfig from the `[audit]` table of a parsed TOML document."""
    audit = _coerce_dict(data.get("audit"))

    excluded = audit.get("excluded_fields", None)
    if excluded is None:
        excluded_fields = SYSTEM_PROPS
    elif isinstance(excluded, list) and all(isinstance(x, str) for x in excluded):
        excluded_fields = frozenset(x.strip() for x in excluded if x.strip())
    else:
        raise ValueError("audit.excluded_fields must be a list of strings")

    date_format = audit.get("date_format", DATE_FORMAT)
    if not isinstance(date_format, str) or not date_format.strip():
        raise ValueError("audit.date_format must be a non-empty string")

    empty_value = audit.get("empty_value", EMPTY_VALUE)
    if not isinstance(empty_value, str):
        raise ValueError("audit.empty_value must be a string")

    return DiffConfig(
        excluded_fields=excluded_fields,
        date_format=date_format,
        empty_value=empty_value,
    )


def load_config(path: str | Path) -> DiffConfig:
    """
    Load diff configuration from TOML.

    Example:

        [audit]
        excluded_fields = ["dc:created", "dc:modified"]
        date_format = "%m/%d/%Y"

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the TOML is malformed or a key has the wrong type
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse config TOML: {e}") from e
    return parse_config(data)
