"""
Run Manifest
~~~~~~~~~~~~

Persistent record of every path an installation run has written, so a
rollback started from a later process can find paths beyond the
statically known ones.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from doh_edge.core.models import ManagedPath
from doh_edge.exceptions import BackupError

__all__ = ["RunManifest"]

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


class RunManifest:
    """
    JSON file of managed paths, stored beside the backups.

    The file is rewritten whole on every registration. Entries are never
    removed: a path written once stays a rollback target.
    """

    def __init__(self, backup_root: str | Path) -> None:
        self._path = Path(backup_root) / MANIFEST_NAME
        self._entries: dict[Path, ManagedPath] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def register(self, managed: ManagedPath) -> None:
        """Add a path to the manifest, persisting immediately if it is new."""
        if managed.path in self._entries:
            return
        self._entries[managed.path] = managed
        self._save()
        logger.debug("Registered %s (%s) in run manifest", managed.path, managed.owner)

    def paths(self) -> list[ManagedPath]:
        """Return every registered path, in registration order."""
        return list(self._entries.values())

    def __contains__(self, path: object) -> bool:
        return Path(str(path)) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise BackupError(
                f"Run manifest {self._path} is unreadable: {exc}"
            ) from exc

        for item in data.get("paths", []):
            managed = ManagedPath(path=Path(item["path"]), owner=item.get("owner", ""))
            self._entries[managed.path] = managed

    def _save(self) -> None:
        data = {
            "updated_at": datetime.now(UTC).isoformat(),
            "paths": [
                {"path": str(m.path), "owner": m.owner} for m in self._entries.values()
            ],
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{MANIFEST_NAME}."
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self._path)
        except OSError as exc:
            raise BackupError(
                f"Failed to write run manifest {self._path}: {exc}"
            ) from exc
