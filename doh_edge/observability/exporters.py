"""
Journal Exporters
~~~~~~~~~~~~~~~~~

Write journal entries as JSON lines to a stream or an append-only file.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from doh_edge.core.models import JournalEntry

__all__ = ["StreamExporter", "JsonlFileExporter"]


class StreamExporter:
    """
    Writes journal entries as JSON lines to a stream (stdout by default).

    Each entry is serialized as a single JSON line for easy piping
    to log aggregators.
    """

    def __init__(self, stream: object | None = None) -> None:
        self._stream = stream or sys.stdout

    def export(self, entry: JournalEntry) -> None:
        """Write the entry as a JSON line to the output stream."""
        line = json.dumps(entry.to_dict(), default=str)
        self._stream.write(line + "\n")  # type: ignore[union-attr]
        self._stream.flush()  # type: ignore[union-attr]


class JsonlFileExporter:
    """Appends journal entries to a JSON-lines file, one entry per line."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def export(self, entry: JournalEntry) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), default=str) + "\n")
