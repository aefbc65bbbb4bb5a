"""doh-edge backups: snapshot storage, run manifest and managed writes."""

from doh_edge.backup.manifest import RunManifest
from doh_edge.backup.store import BackupStore
from doh_edge.backup.writer import ManagedFileWriter

__all__ = [
    "BackupStore",
    "ManagedFileWriter",
    "RunManifest",
]
