"""
Service Orchestrator
~~~~~~~~~~~~~~~~~~~~

systemd façade for the resolver and gateway daemons: restart, enable,
stop, state queries, log tails, and each daemon's native config check.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from doh_edge.core.models import ServiceHandle
from doh_edge.core.states import ServiceState
from doh_edge.exceptions import (
    ExternalToolError,
    ServiceError,
    ServiceHealthError,
    ValidationError,
)
from doh_edge.system.runner import CommandRunner

__all__ = ["Service", "ServiceOrchestrator"]

logger = logging.getLogger(__name__)

# systemctl exit status for "unit not loaded"
_UNIT_NOT_LOADED = 5


class Service:
    """
    One supervised daemon.

    Args:
        name: systemd unit name, e.g. "unbound".
        runner: Command runner.
        validate_command: Daemon-native static config check, if the
            daemon has one.
    """

    def __init__(
        self,
        name: str,
        runner: CommandRunner,
        validate_command: Sequence[str] | None = None,
    ) -> None:
        self.name = name
        self._runner = runner
        self._validate_command = list(validate_command) if validate_command else None

    @property
    def has_validator(self) -> bool:
        return self._validate_command is not None

    def restart(self) -> None:
        logger.info("Restarting %s", self.name)
        self._runner.run(["systemctl", "restart", self.name], error_cls=ServiceError)

    def enable(self) -> None:
        self._runner.run(["systemctl", "enable", self.name], error_cls=ServiceError)

    def stop(self) -> None:
        """Stop the service. Stopping a stopped or unknown unit succeeds."""
        result = self._runner.run(
            ["systemctl", "stop", self.name], check=False, error_cls=ServiceError
        )
        if result.ok:
            logger.info("Stopped %s", self.name)
            return
        if result.returncode == _UNIT_NOT_LOADED:
            logger.debug("%s is not loaded; nothing to stop", self.name)
            return
        raise ServiceError(
            f"Failed to stop {self.name}",
            tool=result.command,
            returncode=result.returncode,
            stderr=result.stderr,
        )

    def state(self) -> ServiceHandle:
        """Query the supervisor for the current state. Never cached."""
        result = self._runner.run(["systemctl", "is-active", self.name], check=False)
        return ServiceHandle(name=self.name, state=ServiceState.parse(result.stdout))

    def is_active(self) -> bool:
        return self.state().is_active

    def tail_log(self, n: int = 20) -> list[str]:
        """Return the last ``n`` journal lines for the service, oldest first."""
        result = self._runner.run(
            ["journalctl", "-u", self.name, "--no-pager", "-n", str(n)],
            check=False,
        )
        lines = result.stdout.splitlines()
        return lines[-n:]

    def validate_config(self) -> None:
        """
        Run the daemon's static config check.

        A service without a validator passes trivially.

        Raises:
            ValidationError: If the check rejects the configuration.
        """
        if self._validate_command is None:
            return
        try:
            self._runner.run(self._validate_command)
        except ExternalToolError as exc:
            raise ValidationError(
                f"{self.name} rejected its configuration",
                service=self.name,
                detail=exc.stderr.strip() or str(exc),
                details={"returncode": exc.returncode},
            ) from exc
        logger.info("%s configuration is valid", self.name)

    def __repr__(self) -> str:
        return f"<Service name={self.name!r} validator={self.has_validator}>"


class ServiceOrchestrator:
    """
    Holds the managed services by logical name ("resolver", "gateway").

    Args:
        services: Mapping of logical name to Service.
        log_tail_lines: Lines of log attached to health-check failures.
    """

    def __init__(
        self,
        services: dict[str, Service],
        log_tail_lines: int = 20,
    ) -> None:
        self._services = dict(services)
        self._log_tail_lines = log_tail_lines

    @classmethod
    def for_edge(
        cls,
        runner: CommandRunner,
        resolver_unit: str = "unbound",
        gateway_unit: str = "dnsdist",
        gateway_config: str = "/etc/dnsdist/dnsdist.conf",
        log_tail_lines: int = 20,
    ) -> ServiceOrchestrator:
        """Build the orchestrator for the Unbound resolver and dnsdist gateway."""
        return cls(
            {
                "resolver": Service(
                    resolver_unit, runner, validate_command=["unbound-checkconf"]
                ),
                "gateway": Service(
                    gateway_unit,
                    runner,
                    validate_command=["dnsdist", "--check-config", "-C", gateway_config],
                ),
            },
            log_tail_lines=log_tail_lines,
        )

    def get(self, name: str) -> Service:
        try:
            return self._services[name]
        except KeyError:
            raise KeyError(f"Unknown service: {name!r}") from None

    def names(self) -> list[str]:
        return list(self._services)

    def status(self) -> list[ServiceHandle]:
        """Return the current state of every managed service."""
        return [service.state() for service in self._services.values()]

    def validate(self, name: str) -> None:
        self.get(name).validate_config()

    def restart_and_verify(self, name: str) -> ServiceHandle:
        """
        Restart a service, enable it, and confirm it reports active.

        Raises:
            ServiceError: If the supervisor fails the restart or enable.
            ServiceHealthError: If the service is not active afterwards;
                carries the tail of the service log.
        """
        service = self.get(name)
        service.restart()
        service.enable()

        handle = service.state()
        if not handle.is_active:
            log_tail = service.tail_log(self._log_tail_lines)
            logger.error("%s failed to start (state=%s)", service.name, handle.state)
            raise ServiceHealthError(
                f"{service.name} is {handle.state} after restart",
                service=service.name,
                log_tail=log_tail,
            )
        logger.info("%s started successfully", service.name)
        return handle

    def stop_all(self, order: Sequence[str] | None = None) -> list[str]:
        """
        Stop services best-effort, returning the names that failed to stop.

        Failures are logged, not raised.
        """
        failures: list[str] = []
        for name in order or self.names():
            service = self.get(name)
            try:
                service.stop()
            except ExternalToolError as exc:
                logger.warning("Could not stop %s: %s", service.name, exc)
                failures.append(service.name)
        return failures
