"""
Rollback Engine
~~~~~~~~~~~~~~~

Returns managed configuration files to their newest backup, or removes
them if they were never backed up, after stopping the managed services.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from doh_edge.backup.store import BackupStore
from doh_edge.core.models import ManagedPath, RollbackReport
from doh_edge.exceptions import BackupError
from doh_edge.system.services import ServiceOrchestrator

__all__ = ["RollbackEngine"]

logger = logging.getLogger(__name__)

# gateway depends on resolver, so it goes down first
STOP_ORDER = ("gateway", "resolver")


class RollbackEngine:
    """
    Configuration-only rollback.

    Packages are never purged or reinstalled here. Running rollback
    twice is safe: the second pass restores the same backups again and
    finds already-removed files absent.
    """

    def __init__(self, store: BackupStore, services: ServiceOrchestrator) -> None:
        self._store = store
        self._services = services

    def rollback(self, paths: Iterable[ManagedPath]) -> RollbackReport:
        """
        Restore every path to its newest backup, or delete it if it has none.

        Args:
            paths: Managed paths to roll back. Duplicates are ignored.

        Returns:
            A RollbackReport of what was restored, removed or already absent.

        Raises:
            BackupError: If a backup exists but cannot be restored, or an
                unbacked file cannot be removed.
        """
        report = RollbackReport()
        report.stop_failures = self._services.stop_all(
            [name for name in STOP_ORDER if name in self._services.names()]
        )

        seen = set()
        for managed in paths:
            if managed.path in seen:
                continue
            seen.add(managed.path)
            self._rollback_path(managed, report)

        logger.info(
            "Rollback complete: %d restored, %d removed, %d already absent",
            len(report.restored),
            len(report.removed),
            len(report.absent),
        )
        return report

    def _rollback_path(self, managed: ManagedPath, report: RollbackReport) -> None:
        path = managed.path
        record = self._store.latest(path)

        if record is not None:
            self._store.restore(record)
            report.restored.append(path)
            return

        if not path.exists():
            logger.info("No backup found for %s and it does not exist", path)
            report.absent.append(path)
            return

        try:
            path.unlink()
        except OSError as exc:
            raise BackupError(f"Failed to remove {path}: {exc}") from exc
        logger.info("No backup found for %s. File removed.", path)
        report.removed.append(path)
