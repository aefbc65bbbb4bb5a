"""
doh-edge Data Models
~~~~~~~~~~~~~~~~~~~~

Defines the dataclasses that flow through the lifecycle manager:
managed paths, backup records, installation steps, and the results of
install and rollback runs.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from doh_edge.core.states import Idempotency, ServiceState

if TYPE_CHECKING:
    from doh_edge.steps.context import StepContext

__all__ = [
    "ManagedPath",
    "BackupRecord",
    "InstallationStep",
    "RunResult",
    "ServiceHandle",
    "RollbackReport",
    "JournalEntry",
]


@dataclass(frozen=True)
class ManagedPath:
    """
    A filesystem path doh-edge is permitted to overwrite and snapshot.

    Attributes:
        path: Absolute path of the managed file.
        owner: Tag of the component that writes it, e.g. "resolver".
    """

    path: Path
    owner: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        if not self.path.is_absolute():
            raise ValueError(f"Managed path must be absolute: {self.path}")


@dataclass(frozen=True, order=True)
class BackupRecord:
    """
    One snapshot of a managed path's prior content.

    Records order by ``(source, version)`` so sorting a list for one path
    gives chronological order.

    Attributes:
        source: The path that was backed up.
        version: Unix timestamp (seconds) marker, strictly increasing per path.
        location: Where the snapshot bytes live under the backup root.
        created_at: When the snapshot was taken.
    """

    source: Path
    version: int
    location: Path = field(compare=False)
    created_at: datetime = field(
        default_factory=lambda: datetime.now(UTC), compare=False
    )

    def read_bytes(self) -> bytes:
        """Return the snapshot content."""
        return self.location.read_bytes()


@dataclass
class InstallationStep:
    """
    A named, ordered unit of installation work.

    Attributes:
        name: Short identifier, shown to the operator on failure.
        ordinal: Position in the run; steps execute in ascending order.
        apply: Performs the step's writes and package/certificate work.
        check: Prerequisite; raises PreconditionError when unmet.
        idempotency: How the step behaves on an already-converged host.
        optional: Skip instead of failing when ``check`` is unmet.
        services: Services whose configuration this step changes. Each is
            validated, restarted, enabled and health-checked after ``apply``.
        description: Human-readable summary for progress output.
    """

    name: str
    ordinal: int
    apply: Callable[[StepContext], None]
    check: Callable[[StepContext], None] | None = None
    idempotency: Idempotency = Idempotency.SAFE_TO_REPEAT
    optional: bool = False
    services: tuple[str, ...] = ()
    description: str = ""


@dataclass
class RunResult:
    """
    Outcome of executing an installation step sequence.

    Attributes:
        completed: True when every step succeeded or was skipped.
        failed_step: Name of the step that aborted the run.
        cause: The error that aborted the run.
        executed: Names of steps that ran to completion.
        skipped: Names of optional steps skipped by their prerequisite.
    """

    completed: bool
    failed_step: str | None = None
    cause: Exception | None = None
    executed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @classmethod
    def success(
        cls, executed: list[str], skipped: list[str] | None = None
    ) -> RunResult:
        return cls(completed=True, executed=executed, skipped=skipped or [])

    @classmethod
    def failure(
        cls,
        step_name: str,
        cause: Exception,
        executed: list[str] | None = None,
        skipped: list[str] | None = None,
    ) -> RunResult:
        return cls(
            completed=False,
            failed_step=step_name,
            cause=cause,
            executed=executed or [],
            skipped=skipped or [],
        )

    @property
    def exit_code(self) -> int:
        return 0 if self.completed else 1

    def __str__(self) -> str:
        if self.completed:
            return "Completed"
        return f"Failed({self.failed_step}: {self.cause})"


@dataclass(frozen=True)
class ServiceHandle:
    """A managed daemon's logical name and its state at one point in time."""

    name: str
    state: ServiceState = ServiceState.UNKNOWN

    @property
    def is_active(self) -> bool:
        return self.state == ServiceState.ACTIVE


@dataclass
class RollbackReport:
    """
    Summary of a rollback run.

    Attributes:
        restored: Paths copied back from their newest backup.
        removed: Paths deleted because no backup existed.
        absent: Paths with no backup that were already absent.
        stop_failures: Services that could not be stopped.
    """

    restored: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    absent: list[Path] = field(default_factory=list)
    stop_failures: list[str] = field(default_factory=list)

    @property
    def total_paths(self) -> int:
        return len(self.restored) + len(self.removed) + len(self.absent)


@dataclass
class JournalEntry:
    """
    One step transition, as recorded in the run journal.

    Attributes:
        step: Step name.
        status: One of the StepStatus values.
        duration_ms: Time spent in the step so far.
        detail: Error text for failures, reason for skips.
        timestamp: When the transition happened.
    """

    step: str
    status: str
    duration_ms: int = 0
    detail: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "status": self.status,
            "duration_ms": self.duration_ms,
            "detail": self.detail,
            "timestamp": self.timestamp.isoformat(),
        }
