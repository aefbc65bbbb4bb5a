"""Tests for the run journal and its exporters."""

import io
import json

from doh_edge.core.models import JournalEntry
from doh_edge.observability.exporters import JsonlFileExporter, StreamExporter
from doh_edge.observability.journal import RunJournal


class _BrokenExporter:
    def export(self, entry):
        raise OSError("disk gone")


class TestRunJournal:
    def test_query_filters(self):
        journal = RunJournal()
        journal.write(JournalEntry(step="packages", status="started"))
        journal.write(JournalEntry(step="packages", status="completed"))
        journal.write(JournalEntry(step="certificate", status="failed", detail="boom"))

        assert len(journal) == 3
        assert len(journal.query(step="packages")) == 2
        assert journal.query(status="failed")[0].detail == "boom"

    def test_max_entries(self):
        journal = RunJournal(max_entries=2)
        for i in range(5):
            journal.write(JournalEntry(step=f"s{i}", status="started"))
        assert [e.step for e in journal.query()] == ["s3", "s4"]

    def test_exporter_failure_is_contained(self):
        journal = RunJournal()
        journal.add_exporter(_BrokenExporter())
        journal.write(JournalEntry(step="packages", status="started"))
        assert len(journal) == 1

    def test_clear(self):
        journal = RunJournal()
        journal.write(JournalEntry(step="packages", status="started"))
        journal.clear()
        assert len(journal) == 0


class TestExporters:
    def test_stream_exporter_writes_json_lines(self):
        stream = io.StringIO()
        StreamExporter(stream).export(JournalEntry(step="packages", status="completed"))

        data = json.loads(stream.getvalue())
        assert data["step"] == "packages"
        assert data["status"] == "completed"

    def test_jsonl_file_exporter_appends(self, tmp_path):
        exporter = JsonlFileExporter(tmp_path / "logs" / "journal.jsonl")
        exporter.export(JournalEntry(step="a", status="started"))
        exporter.export(JournalEntry(step="a", status="completed", duration_ms=12))

        lines = exporter.path.read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])["duration_ms"] == 12
