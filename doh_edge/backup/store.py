"""
Backup Store
~~~~~~~~~~~~

Timestamp-versioned snapshots of files doh-edge is about to overwrite.

Each snapshot mirrors its source under the backup root at the source's
absolute path, suffixed with ``.bak.<unix-timestamp>``::

    /var/backups/doh-backup/etc/unbound/unbound.conf.d/doh.conf.bak.1717171717

An in-memory index keyed by source path is built from the backup root
once, then kept current as snapshots are taken, so ``latest()`` is a
lookup rather than a directory scan.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from doh_edge.core.models import BackupRecord
from doh_edge.exceptions import BackupError

__all__ = ["BackupStore"]

logger = logging.getLogger(__name__)

_SUFFIX_RE = re.compile(r"^(?P<name>.+)\.bak\.(?P<version>\d+)$")


class BackupStore:
    """
    Owns the on-disk snapshot files under a single backup root.

    Args:
        root: Backup root directory. Created if missing.
        clock: Returns the current unix time; injectable for tests.

    Raises:
        BackupError: If the backup root cannot be created.
    """

    def __init__(
        self,
        root: str | Path,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._root = Path(root)
        self._clock = clock
        self._index: dict[Path, list[BackupRecord]] = {}

        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BackupError(
                f"Failed to create backup directory {self._root}: {exc}",
                details={"root": str(self._root)},
            ) from exc

        self._load_index()

    @property
    def root(self) -> Path:
        return self._root

    def mirror_path(self, path: str | Path) -> Path:
        """Return where snapshots of ``path`` are stored, minus the suffix."""
        source = Path(os.path.abspath(path))
        return self._root / source.relative_to(source.anchor)

    def snapshot(self, path: str | Path) -> BackupRecord | None:
        """
        Copy the current content of ``path`` into the store.

        Args:
            path: File about to be overwritten.

        Returns:
            The new BackupRecord, or None if ``path`` does not exist.

        Raises:
            BackupError: If the snapshot cannot be written.
        """
        source = Path(os.path.abspath(path))
        if not source.is_file():
            logger.debug("No backup for %s: file does not exist", source)
            return None

        version = self._next_version(source)
        location = self.mirror_path(source).with_name(
            f"{source.name}.bak.{version}"
        )

        try:
            location.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, location)
        except OSError as exc:
            raise BackupError(
                f"Failed to back up {source} to {location}: {exc}",
                details={"source": str(source), "location": str(location)},
            ) from exc

        record = BackupRecord(
            source=source,
            version=version,
            location=location,
            created_at=datetime.now(UTC),
        )
        self._index.setdefault(source, []).append(record)
        logger.info("Backed up %s to %s", source, location)
        return record

    def latest(self, path: str | Path) -> BackupRecord | None:
        """Return the newest record for ``path``, or None if there is none."""
        records = self._index.get(Path(os.path.abspath(path)))
        if not records:
            return None
        return records[-1]

    def records(self, path: str | Path) -> list[BackupRecord]:
        """Return every record for ``path``, oldest first."""
        return list(self._index.get(Path(os.path.abspath(path)), []))

    def sources(self) -> list[Path]:
        """Return every path that has at least one backup."""
        return sorted(self._index)

    def restore(self, record: BackupRecord) -> None:
        """
        Copy a record's content back onto its source path.

        Raises:
            BackupError: If the snapshot is missing or cannot be copied.
        """
        try:
            record.source.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(record.location, record.source)
        except OSError as exc:
            raise BackupError(
                f"Failed to restore {record.source} from {record.location}: {exc}",
                details={"source": str(record.source)},
            ) from exc
        logger.info("Restored %s from %s", record.source, record.location)

    def _next_version(self, source: Path) -> int:
        version = int(self._clock())
        newest = self.latest(source)
        if newest is not None and version <= newest.version:
            version = newest.version + 1
        return version

    def _load_index(self) -> None:
        """Rebuild the index from snapshot files already under the root."""
        for dirpath, _dirnames, filenames in os.walk(self._root):
            for filename in filenames:
                match = _SUFFIX_RE.match(filename)
                if match is None:
                    continue
                location = Path(dirpath) / filename
                relative = location.parent.relative_to(self._root)
                source = Path("/") / relative / match.group("name")
                version = int(match.group("version"))
                self._index.setdefault(source, []).append(
                    BackupRecord(
                        source=source,
                        version=version,
                        location=location,
                        created_at=datetime.fromtimestamp(version, tz=UTC),
                    )
                )

        for records in self._index.values():
            records.sort()

        logger.debug(
            "Indexed %d backups for %d paths under %s",
            sum(len(r) for r in self._index.values()),
            len(self._index),
            self._root,
        )
