"""
Step Context
~~~~~~~~~~~~

Everything an installation step may touch, built once per run and passed
by reference to every step.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from doh_edge.backup.writer import ManagedFileWriter
from doh_edge.config.schema import EdgeConfig, RunConfig
from doh_edge.preflight import PreflightGuard
from doh_edge.render import ConfigRenderer
from doh_edge.system.acme import AcmeClient, CertificatePaths
from doh_edge.system.packages import PackageManager
from doh_edge.system.runner import CommandRunner
from doh_edge.system.services import ServiceOrchestrator

__all__ = ["StepContext"]


@dataclass
class StepContext:
    """
    Collaborators and inputs for one installation run.

    Attributes:
        config: Host configuration.
        run: Operator inputs (domain, email) for this run.
        writer: Managed-File Writer; the only way steps write config files.
        packages: Package manager adapter.
        services: Service orchestrator.
        acme: ACME client adapter.
        renderer: Config template renderer.
        preflight: Port and environment checks used by step prerequisites.
        runner: Command runner for ownership and mode fixes.
        http: HTTP client for downloads and the end-to-end probe.
        certificate: Set by the certificate step for the gateway step.
    """

    config: EdgeConfig
    run: RunConfig
    writer: ManagedFileWriter
    packages: PackageManager
    services: ServiceOrchestrator
    acme: AcmeClient
    renderer: ConfigRenderer
    preflight: PreflightGuard
    runner: CommandRunner
    http: httpx.Client
    certificate: CertificatePaths | None = None
