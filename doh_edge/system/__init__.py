"""doh-edge system adapters for external commands."""

from doh_edge.system.acme import AcmeClient, CertificatePaths
from doh_edge.system.packages import PackageManager
from doh_edge.system.runner import CommandResult, CommandRunner
from doh_edge.system.services import Service, ServiceOrchestrator

__all__ = [
    "AcmeClient",
    "CertificatePaths",
    "CommandResult",
    "CommandRunner",
    "PackageManager",
    "Service",
    "ServiceOrchestrator",
]
