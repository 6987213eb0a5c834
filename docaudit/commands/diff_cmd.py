"""Diff and log commands - property audit from snapshot files."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table

from ..config import DEFAULT_CONFIG, load_config
from ..descriptor import AuditContext, ChangeDescriptor
from ..document import Document, track_changes
from ..engine import process_document
from ..schema import SchemaDef, load_schemas
from ..sink import JsonlAuditLog, MemorySink


def load_snapshot(path: Path, schemas: list[SchemaDef]) -> Document:
    """
    Load a document snapshot from YAML or JSON.

    Expected layout:

        doc_id: 0a1b2c
        lifecycle_state: project
        repository: default
        properties:
          dc:title: Report
          dc:subjects: [science]
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: snapshot must be a mapping")

    properties = data.get("properties") or {}
    if not isinstance(properties, dict):
        raise ValueError(f"{path}: 'properties' must be a mapping")

    return Document.from_values(
        schemas,
        properties,
        doc_id=str(data.get("doc_id", "")),
        lifecycle_state=data.get("lifecycle_state"),
        repository_name=data.get("repository"),
    )


def _print_table(console: Console, entries: list[ChangeDescriptor], title: str) -> None:
    table = Table(title=title)
    table.add_column("field", style="cyan", no_wrap=True)
    table.add_column("old", style="red")
    table.add_column("new", style="green")
    table.add_column("comment", style="dim")
    for e in entries:
        table.add_row(e.field_name, e.old_value, e.new_value, e.comment)
    console.print(table)


def run_diff(
    schema_path: Path,
    before_path: Path,
    after_path: Path,
    *,
    principal: str,
    config_path: Path | None = None,
    log_path: Path | None = None,
    output_json: bool = False,
    timestamp: datetime | None = None,
) -> int:
    """
    Diff two snapshot files and report property changes.

    Returns the number of change entries.
    """
    console = Console(stderr=True)

    config = load_config(config_path) if config_path else DEFAULT_CONFIG
    schemas = load_schemas(schema_path)
    before = load_snapshot(before_path, schemas)
    after = track_changes(before, load_snapshot(after_path, schemas))

    context = AuditContext(
        timestamp=timestamp or datetime.now(timezone.utc),
        principal_name=principal,
        doc_id=after.doc_id,
        doc_lifecycle=after.lifecycle_state,
        repository_id=after.repository_name,
    )

    sink: Any = JsonlAuditLog(log_path) if log_path else MemorySink()
    entries = process_document(context, before, after, sink, config)

    if output_json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
    elif entries:
        _print_table(Console(), entries, f"Property changes ({after.doc_id or after_path.name})")
    else:
        console.print("[dim]No property changes.[/dim]")

    if log_path and entries:
        console.print(f"Appended {len(entries)} entries to {log_path}", style="green")

    return len(entries)


def run_log(
    log_path: Path,
    *,
    doc_id: str | None = None,
    last_n: int | None = None,
    output_json: bool = False,
) -> int:
    """
    Print entries from a JSON Lines audit log.

    Returns the number of entries displayed.
    """
    console = Console()
    log = JsonlAuditLog(log_path)

    entries = log.read_all()
    if doc_id:
        entries = [e for e in entries if e.doc_id == doc_id]
    if last_n is not None:
        entries = entries[-last_n:] if last_n > 0 else []

    if not entries:
        console.print("[dim]No entries found.[/dim]")
        return 0

    if output_json:
        for e in entries:
            print(e.to_json())
        return len(entries)

    for e in entries:
        ts = e.timestamp.isoformat()[:19].replace("T", " ")
        console.print(f"[dim]{ts}[/dim] [bold]{e.principal_name}[/bold] {e.doc_id}", highlight=False)
        console.print(f"  {e.comment}", highlight=False)

    return len(entries)


def run_schemas(schema_path: Path) -> int:
    """
    List schemas and their fields.

    Returns the number of schemas.
    """
    console = Console()
    schemas = load_schemas(schema_path)

    table = Table(title="Schemas")
    table.add_column("schema", style="bold")
    table.add_column("property", style="cyan")
    table.add_column("shape", style="magenta")
    table.add_column("type")

    for schema in schemas:
        for fdef in schema.fields:
            qname = schema.qualified_name(fdef.name)
            table.add_row(schema.name, qname, fdef.shape.value, fdef.type)
            for child in fdef.fields:
                table.add_row("", f"{qname}/{child.name}", child.shape.value, child.type)

    console.print(table)
    return len(schemas)
