"""
Audit log sinks.

The diff engine hands each batch of change descriptors to a sink in a single
call. Two sinks ship here:
- MemorySink: keeps batches in memory (tests, embedding)
- JsonlAuditLog: append-only JSON Lines file, one descriptor per line
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator, Protocol, Sequence, runtime_checkable

from .descriptor import ChangeDescriptor

logger = logging.getLogger(__name__)


@runtime_checkable
class AuditSink(Protocol):
    """Receives batches of change descriptors."""

    def add_log_entries(self, entries: Sequence[ChangeDescriptor]) -> None:
        ...


class MemorySink:
    """Collects batches in memory."""

    def __init__(self) -> None:
        self.batches: list[list[ChangeDescriptor]] = []

    def add_log_entries(self, entries: Sequence[ChangeDescriptor]) -> None:
        self.batches.append(list(entries))

    @property
    def entries(self) -> list[ChangeDescriptor]:
        return [e for batch in self.batches for e in batch]


class JsonlAuditLog:
    """Append-only audit log for property modification entries.

    Storage format: JSON Lines (.jsonl) - one descriptor per line.
    Entries are never modified or deleted.
    """

    def __init__(self, log_path: Path):
        """Initialize the log.

        Args:
            log_path: Path to the .jsonl file (created on first write)
        """
        self.log_path = Path(log_path)

    def add_log_entries(self, entries: Sequence[ChangeDescriptor]) -> None:
        """Append a batch. The whole batch goes out in one write."""
        if not entries:
            return
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        payload = "".join(e.to_json() + "\n" for e in entries)
        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(payload)
        logger.debug("appended %d entries to %s", len(entries), self.log_path)

    def iter_entries(self) -> Iterator[ChangeDescriptor]:
        """Iterate over entries in append order."""
        if not self.log_path.exists():
            return
        with self.log_path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    yield ChangeDescriptor.from_dict(json.loads(line))

    def read_all(self) -> list[ChangeDescriptor]:
        return list(self.iter_entries())

    def count(self) -> int:
        """Count entries in the log."""
        if not self.log_path.exists():
            return 0
        count = 0
        with self.log_path.open("r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    count += 1
        return count
