"""
doh-edge State Enums
~~~~~~~~~~~~~~~~~~~~

Enums for service states, step idempotency classes and run outcomes.
"""

from enum import StrEnum

__all__ = ["ServiceState", "Idempotency", "StepStatus"]


class ServiceState(StrEnum):
    """
    Observed state of a managed daemon, as reported by the supervisor.

    - UNKNOWN: The supervisor returned something unrecognised.
    - ACTIVE: Running.
    - ACTIVATING: Starting, or waiting to be restarted after a crash.
    - INACTIVE: Stopped cleanly, or not loaded.
    - FAILED: Exited with an error.
    """

    UNKNOWN = "unknown"
    ACTIVE = "active"
    ACTIVATING = "activating"
    INACTIVE = "inactive"
    FAILED = "failed"

    @classmethod
    def parse(cls, raw: str) -> "ServiceState":
        """Map ``systemctl is-active`` output onto a state."""
        value = raw.strip().lower()
        if value in ("active", "reloading"):
            return cls.ACTIVE
        if value == "activating":
            return cls.ACTIVATING
        if value in ("inactive", "deactivating"):
            return cls.INACTIVE
        if value == "failed":
            return cls.FAILED
        return cls.UNKNOWN


class Idempotency(StrEnum):
    """
    How a step behaves when invoked on a system already in the target state.

    - SAFE_TO_REPEAT: Rewrites the same content; converges trivially.
    - DESTRUCTIVE_REINSTALL: Queries current state, then purges and
      reinstalls rather than assuming a clean system.
    """

    SAFE_TO_REPEAT = "safe-to-repeat"
    DESTRUCTIVE_REINSTALL = "destructive-reinstall"


class StepStatus(StrEnum):
    """Lifecycle events recorded in the run journal for each step."""

    STARTED = "started"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"
