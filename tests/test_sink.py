"""Tests for audit log sinks."""

from __future__ import annotations

from pathlib import Path

from docaudit.descriptor import build_descriptor
from docaudit.sink import AuditSink, JsonlAuditLog, MemorySink


def test_sinks_satisfy_protocol(tmp_path: Path):
    assert isinstance(MemorySink(), AuditSink)
    assert isinstance(JsonlAuditLog(tmp_path / "audit.jsonl"), AuditSink)


def test_memory_sink_keeps_batches(context):
    sink = MemorySink()
    a = build_descriptor(context, "dc:title", None, "a")
    b = build_descriptor(context, "dc:title", "a", "b")

    sink.add_log_entries([a])
    sink.add_log_entries([b])

    assert sink.batches == [[a], [b]]
    assert sink.entries == [a, b]


def test_jsonl_log_appends(tmp_path: Path, context):
    log = JsonlAuditLog(tmp_path / "nested" / "audit.jsonl")
    assert log.count() == 0
    assert log.read_all() == []

    first = [build_descriptor(context, "dc:title", None, "a")]
    second = [
        build_descriptor(context, "dc:subjects", None, "art", comment="dc:subjects : Added art"),
        build_descriptor(context, "dc:subjects", "science", None, comment="dc:subjects : Removed science"),
    ]
    log.add_log_entries(first)
    log.add_log_entries(second)

    assert log.count() == 3
    assert log.read_all() == first + second

    lines = log.log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3


def test_jsonl_log_ignores_empty_batch(tmp_path: Path):
    log = JsonlAuditLog(tmp_path / "audit.jsonl")
    log.add_log_entries([])
    assert not log.log_path.exists()
