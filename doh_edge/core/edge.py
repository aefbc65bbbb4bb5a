"""
DohEdge Main Facade
~~~~~~~~~~~~~~~~~~~

The primary entry point for doh-edge. Assembles the backup store,
system adapters, step executor and rollback engine, and exposes
install, rollback and status operations.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

import httpx

from doh_edge.backup.manifest import RunManifest
from doh_edge.backup.store import BackupStore
from doh_edge.backup.writer import ManagedFileWriter
from doh_edge.config.defaults import DEFAULT_CONFIG
from doh_edge.config.loader import load_config, load_config_from_dict
from doh_edge.config.schema import EdgeConfig, RunConfig
from doh_edge.core.models import (
    BackupRecord,
    ManagedPath,
    RollbackReport,
    RunResult,
    ServiceHandle,
)
from doh_edge.observability.exporters import JsonlFileExporter
from doh_edge.observability.journal import RunJournal
from doh_edge.preflight import PreflightGuard
from doh_edge.render import ConfigRenderer
from doh_edge.rollback.engine import RollbackEngine
from doh_edge.steps.context import StepContext
from doh_edge.steps.executor import StepExecutor
from doh_edge.steps.install import build_install_steps, managed_paths
from doh_edge.system.acme import AcmeClient
from doh_edge.system.packages import PackageManager
from doh_edge.system.runner import CommandRunner
from doh_edge.system.services import ServiceOrchestrator

__all__ = ["DohEdge"]

logger = logging.getLogger(__name__)

JOURNAL_NAME = "journal.jsonl"


class DohEdge:
    """
    Main doh-edge class, the entry point for install and rollback runs.

    Both ``install`` and ``rollback`` pass the preflight checks (root,
    OS identity) before touching the backup store.

    Args:
        config: Host configuration.
        runner: Command runner shared by all system adapters.
        http: HTTP client for root-hint downloads and the DoH probe.
        preflight: Environment checks.
        clock: Unix-time source for backup version markers.
    """

    def __init__(
        self,
        config: EdgeConfig | None = None,
        runner: CommandRunner | None = None,
        http: httpx.Client | None = None,
        preflight: PreflightGuard | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or EdgeConfig()
        self._runner = runner or CommandRunner(env={"DEBIAN_FRONTEND": "noninteractive"})
        self._owns_http = http is None
        self._http = http or httpx.Client(
            timeout=self._config.probe.timeout,
            verify=self._config.probe.verify_tls,
            follow_redirects=True,
        )
        self._preflight = preflight or PreflightGuard(self._config.paths.os_release)
        self._clock = clock
        self._store: BackupStore | None = None

        # ── Subsystems ────────────────────────────────────────────
        self.services = ServiceOrchestrator.for_edge(
            self._runner,
            resolver_unit=self._config.services.resolver,
            gateway_unit=self._config.services.gateway,
            gateway_config=self._config.paths.gateway_config,
            log_tail_lines=self._config.services.log_tail_lines,
        )
        self.packages = PackageManager(self._runner)
        self.acme = AcmeClient(
            self._runner,
            live_dir=self._config.paths.letsencrypt_live,
            http_port=self._config.acme.http_port,
            staging=self._config.acme.staging,
        )
        self.renderer = ConfigRenderer(self._config)
        self.journal = RunJournal()

    # ── Properties ─────────────────────────────────────────────────

    @property
    def config(self) -> EdgeConfig:
        return self._config

    @property
    def version(self) -> str:
        """Return the doh-edge version string."""
        from doh_edge import __version__

        return __version__

    # ── Class Methods (constructors) ──────────────────────────────

    @classmethod
    def from_config(cls, path: str) -> DohEdge:
        """
        Create a DohEdge instance from a YAML config file.

        Args:
            path: Path to the YAML config.

        Returns:
            Configured DohEdge instance.
        """
        return cls(config=load_config(path))

    @classmethod
    def default(cls) -> DohEdge:
        """Create a DohEdge instance for a stock Ubuntu 22.04 host."""
        return cls(config=load_config_from_dict(DEFAULT_CONFIG))

    # ── Public API ────────────────────────────────────────────────

    def check_environment(self) -> None:
        """
        Run the root and OS checks.

        Raises:
            PreconditionError: If either is unmet.
        """
        self._preflight.assert_root()
        self._preflight.assert_os(
            self._config.platform.distro, self._config.platform.version
        )

    def open_store(self) -> BackupStore:
        """
        Return the backup store, creating the backup root on first use.

        Raises:
            BackupError: If the backup root cannot be created.
        """
        if self._store is None:
            self._store = BackupStore(self._config.paths.backup_root, clock=self._clock)
            self.journal.add_exporter(JsonlFileExporter(self._store.root / JOURNAL_NAME))
        return self._store

    def install(self, run: RunConfig) -> RunResult:
        """
        Provision the resolver and DoH gateway for ``run.domain``.

        Args:
            run: Validated operator inputs for this run.

        Returns:
            The RunResult; ``Failed`` names the step that aborted.

        Raises:
            PreconditionError: If the environment checks fail.
            BackupError: If the backup root cannot be created.
        """
        self.check_environment()
        store = self.open_store()
        manifest = RunManifest(store.root)

        context = StepContext(
            config=self._config,
            run=run,
            writer=ManagedFileWriter(store, manifest),
            packages=self.packages,
            services=self.services,
            acme=self.acme,
            renderer=self.renderer,
            preflight=self._preflight,
            runner=self._runner,
            http=self._http,
        )
        logger.info("Installing DoH edge for %s", run.domain)
        result = StepExecutor(context, self.journal).run(build_install_steps(self._config))
        if result.completed:
            logger.info("DoH edge for %s is installed and configured", run.domain)
        return result

    def rollback_targets(self) -> list[ManagedPath]:
        """Static managed paths plus every path recorded in the run manifest."""
        store = self.open_store()
        targets = {m.path: m for m in managed_paths(self._config)}
        for managed in RunManifest(store.root).paths():
            targets.setdefault(managed.path, managed)
        return list(targets.values())

    def rollback(self) -> RollbackReport:
        """
        Stop the managed services and restore configuration from backups.

        Raises:
            PreconditionError: If the environment checks fail.
            BackupError: If the backup root cannot be created or a
                restore fails.
        """
        self.check_environment()
        logger.info("Starting rollback")
        engine = RollbackEngine(self.open_store(), self.services)
        return engine.rollback(self.rollback_targets())

    def status(self) -> list[ServiceHandle]:
        """Return the current state of the resolver and gateway."""
        return self.services.status()

    def backups(self, path: str | Path) -> list[BackupRecord]:
        """Return every backup of ``path``, oldest first."""
        return self.open_store().records(path)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> DohEdge:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<DohEdge backup_root={self._config.paths.backup_root!r} "
            f"services={self.services.names()!r}>"
        )
