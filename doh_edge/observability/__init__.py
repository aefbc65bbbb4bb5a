"""doh-edge observability: run journal and exporters."""

from doh_edge.observability.exporters import JsonlFileExporter, StreamExporter
from doh_edge.observability.journal import RunJournal

__all__ = [
    "RunJournal",
    "StreamExporter",
    "JsonlFileExporter",
]
