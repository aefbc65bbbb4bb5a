"""
Managed-File Writer
~~~~~~~~~~~~~~~~~~~

Replaces a managed file's content in full, backing it up first.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from doh_edge.backup.manifest import RunManifest
from doh_edge.backup.store import BackupStore
from doh_edge.core.models import BackupRecord, ManagedPath
from doh_edge.exceptions import ManagedWriteError

__all__ = ["ManagedFileWriter"]

logger = logging.getLogger(__name__)


class ManagedFileWriter:
    """
    Writes whole files through the Backup Store.

    Every call snapshots the target exactly once, then swaps in the new
    content atomically (temp file in the same directory + ``os.replace``).
    There are no partial or merged writes.
    """

    def __init__(
        self,
        store: BackupStore,
        manifest: RunManifest | None = None,
        mode: int = 0o644,
    ) -> None:
        self._store = store
        self._manifest = manifest
        self._mode = mode

    def write(
        self,
        target: ManagedPath | str | Path,
        content: str | bytes,
    ) -> BackupRecord | None:
        """
        Back up ``target`` if it exists, then replace its content.

        Args:
            target: The managed path (or a plain path) to write.
            content: The complete new content.

        Returns:
            The BackupRecord taken before the write, or None for a
            first-time write.

        Raises:
            BackupError: If the existing file cannot be backed up.
            ManagedWriteError: If the directory or file cannot be written.
        """
        if not isinstance(target, ManagedPath):
            target = ManagedPath(path=Path(os.path.abspath(target)), owner="")
        path = target.path

        record = self._store.snapshot(path)

        if self._manifest is not None:
            self._manifest.register(target)

        data = content.encode("utf-8") if isinstance(content, str) else content
        mode = path.stat().st_mode & 0o7777 if path.exists() else self._mode

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ManagedWriteError(
                f"Failed to create directory {path.parent}: {exc}",
                details={"path": str(path)},
            ) from exc

        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ManagedWriteError(
                f"Failed to write {path}: {exc}",
                details={"path": str(path)},
            ) from exc

        logger.info("Wrote %s (%d bytes)", path, len(data))
        return record
