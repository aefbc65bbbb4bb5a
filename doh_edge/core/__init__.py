"""doh-edge core module: data models and state enums."""

from doh_edge.core.models import (
    BackupRecord,
    InstallationStep,
    JournalEntry,
    ManagedPath,
    RollbackReport,
    RunResult,
    ServiceHandle,
)
from doh_edge.core.states import Idempotency, ServiceState, StepStatus

__all__ = [
    "Idempotency",
    "ServiceState",
    "StepStatus",
    "BackupRecord",
    "InstallationStep",
    "JournalEntry",
    "ManagedPath",
    "RollbackReport",
    "RunResult",
    "ServiceHandle",
]
