"""
Run Journal
~~~~~~~~~~~

Structured record of every step transition in an installation run.
"""

from __future__ import annotations

import logging
from typing import Any

from doh_edge.core.models import JournalEntry

__all__ = ["RunJournal"]

logger = logging.getLogger(__name__)


class RunJournal:
    """
    In-memory step journal with export support.

    Every step transition gets an entry here. Entries are forwarded to
    configured exporters; an exporter failure is logged and never stops
    the run.
    """

    def __init__(self, max_entries: int = 1000) -> None:
        self._entries: list[JournalEntry] = []
        self._max_entries = max_entries
        self._exporters: list[Any] = []

    def add_exporter(self, exporter: Any) -> None:
        """Add an exporter to receive journal entries."""
        self._exporters.append(exporter)

    def write(self, entry: JournalEntry) -> None:
        """
        Record an entry and forward it to exporters.

        Args:
            entry: The journal entry to record.
        """
        self._entries.append(entry)
        if len(self._entries) > self._max_entries:
            self._entries = self._entries[-self._max_entries :]

        for exporter in self._exporters:
            try:
                exporter.export(entry)
            except Exception as exc:
                logger.error(
                    "Exporter %s failed: %s",
                    type(exporter).__name__,
                    exc,
                )

    def query(self, step: str | None = None, status: str | None = None) -> list[JournalEntry]:
        """Return entries, optionally filtered by step name and status."""
        return [
            e
            for e in self._entries
            if (step is None or e.step == step) and (status is None or e.status == status)
        ]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
