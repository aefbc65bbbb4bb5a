"""
doh-edge: DNS-over-HTTPS edge installer with backup and rollback.

Provisions an Unbound recursive resolver bound to localhost behind a
dnsdist DoH gateway, with a Let's Encrypt certificate. Every config file
the installer writes is backed up first, and ``rollback`` restores the
newest backup of each.

Quick Start::

    from doh_edge import DohEdge, RunConfig

    with DohEdge.default() as edge:
        result = edge.install(RunConfig(domain="doh.example.com", email="ops@example.com"))
        if not result.completed:
            edge.rollback()

:license: Apache-2.0
"""

from doh_edge.config.schema import EdgeConfig, RunConfig
from doh_edge.core.edge import DohEdge
from doh_edge.core.models import (
    BackupRecord,
    InstallationStep,
    ManagedPath,
    RollbackReport,
    RunResult,
    ServiceHandle,
)
from doh_edge.core.states import Idempotency, ServiceState

__version__ = "0.1.0"
__license__ = "Apache-2.0"

__all__ = [
    # Main class
    "DohEdge",
    # Config
    "EdgeConfig",
    "RunConfig",
    # Enums
    "Idempotency",
    "ServiceState",
    # Data models
    "BackupRecord",
    "InstallationStep",
    "ManagedPath",
    "RollbackReport",
    "RunResult",
    "ServiceHandle",
    # Version
    "__version__",
]
