"""
doh-edge Custom Exceptions
~~~~~~~~~~~~~~~~~~~~~~~~~~

All custom exception classes for doh-edge, organized by domain.
Every distinct failure mode has its own exception type.

**Structured Error Messages**

Errors that stop a run in front of an operator provide two structured
fields:
- ``what_happened``: Clear plain-English description
- ``how_to_fix``: Concrete, actionable steps
"""

__all__ = [
    # Base
    "DohEdgeError",
    # Config
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigValidationError",
    # Preflight
    "PreconditionError",
    # Backup
    "BackupError",
    "ManagedWriteError",
    # External tools
    "ExternalToolError",
    "PackageError",
    "CertificateError",
    "ServiceError",
    # Service lifecycle
    "ValidationError",
    "ServiceHealthError",
    "ProbeError",
]


# ── Formatting Helper ────────────────────────────────────────────────────────

_SEPARATOR = "─" * 52


def _format_structured_error(
    title: str,
    what_happened: str,
    how_to_fix: str,
) -> str:
    """Build a rich, structured error message."""
    lines = [
        f"  {title}",
        f"  {_SEPARATOR}",
        "  What happened:",
        *[f"    {line}" for line in what_happened.strip().splitlines()],
        "",
        "  How to fix:",
        *[f"    {line}" for line in how_to_fix.strip().splitlines()],
    ]
    return "\n".join(lines)


# ── Base Exception ───────────────────────────────────────────────────────────


class DohEdgeError(Exception):
    """Base exception for all doh-edge errors."""

    def __init__(self, message: str = "", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


# ── Config Exceptions ────────────────────────────────────────────────────────


class ConfigError(DohEdgeError):
    """Base exception for configuration-related errors."""


class ConfigFileNotFoundError(ConfigError):
    """Raised when a configuration file cannot be found at the specified path."""


class ConfigValidationError(ConfigError):
    """Raised when configuration values fail validation."""


# ── Preflight Exceptions ─────────────────────────────────────────────────────


class PreconditionError(DohEdgeError):
    """Raised when a privilege, OS or port check is not met."""


# ── Backup Exceptions ────────────────────────────────────────────────────────


class BackupError(DohEdgeError):
    """Raised when the backup root or a per-file backup cannot be created."""


class ManagedWriteError(DohEdgeError):
    """Raised when a managed file or its parent directory cannot be written."""


# ── External Tool Exceptions ─────────────────────────────────────────────────


class ExternalToolError(DohEdgeError):
    """
    Raised when an external command exits non-zero.

    Attributes:
        tool: The command that was run, as a single string.
        returncode: Exit status of the command.
        stderr: Captured standard error.
    """

    def __init__(
        self,
        message: str = "External command failed",
        tool: str = "",
        returncode: int | None = None,
        stderr: str = "",
        details: dict | None = None,
    ) -> None:
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, details)

    def __str__(self) -> str:
        text = self.args[0] if self.args else ""
        if self.returncode is not None:
            text = f"{text} (exit status {self.returncode})"
        if self.stderr.strip():
            text = f"{text}\n{self.stderr.strip()}"
        return text


class PackageError(ExternalToolError):
    """Raised when the package manager fails to query, purge or install."""


class CertificateError(ExternalToolError):
    """Raised when the ACME client fails to issue a certificate."""


class ServiceError(ExternalToolError):
    """Raised when the service supervisor fails a start/stop/restart/enable."""


# ── Service Lifecycle Exceptions ─────────────────────────────────────────────


class ValidationError(DohEdgeError):
    """
    Raised when a daemon's native config check rejects a new configuration.

    The service is never restarted after this error, so the running
    instance keeps its previous configuration.

    Structured fields:
    - ``what_happened``: which service rejected its config
    - ``how_to_fix``: actionable remediation steps
    """

    def __init__(
        self,
        message: str = "Configuration validation failed",
        service: str = "",
        detail: str = "",
        details: dict | None = None,
        what_happened: str = "",
        how_to_fix: str = "",
    ) -> None:
        self.service = service
        self.detail = detail
        self.what_happened = what_happened or (
            f'The new configuration for "{service}" failed validation.\n'
            f"{detail}".rstrip()
        )
        self.how_to_fix = how_to_fix or (
            "1. Read the validator output above\n"
            "2. Adjust the settings in your doh-edge config file\n"
            "3. Re-run the installation; the running service was not restarted"
        )
        super().__init__(message, details)

    def __str__(self) -> str:
        return _format_structured_error(
            title=f"ValidationError: {self.args[0]}",
            what_happened=self.what_happened,
            how_to_fix=self.how_to_fix,
        )


class ServiceHealthError(DohEdgeError):
    """
    Raised when a service is not active after a restart.

    Structured fields:
    - ``what_happened``: the service and the tail of its log
    - ``how_to_fix``: actionable remediation steps
    """

    def __init__(
        self,
        message: str = "Service is not healthy",
        service: str = "",
        log_tail: list[str] | None = None,
        details: dict | None = None,
        what_happened: str = "",
        how_to_fix: str = "",
    ) -> None:
        self.service = service
        self.log_tail = list(log_tail or [])
        tail = "\n".join(self.log_tail) if self.log_tail else "(no log output)"
        self.what_happened = what_happened or (
            f'"{service}" did not report active after restart. Last log lines:\n'
            f"{tail}"
        )
        self.how_to_fix = how_to_fix or (
            f"1. Inspect the full log: journalctl -xeu {service}\n"
            "2. Fix the underlying condition and re-run the installation\n"
            "3. Or run `doh-edge rollback` to restore the previous configuration"
        )
        super().__init__(message, details)

    def __str__(self) -> str:
        return _format_structured_error(
            title=f"ServiceHealthError: {self.args[0]}",
            what_happened=self.what_happened,
            how_to_fix=self.how_to_fix,
        )


class ProbeError(ServiceHealthError):
    """Raised when the end-to-end DoH query does not get a valid answer."""

    def __init__(
        self,
        message: str = "DoH probe failed",
        url: str = "",
        service: str = "dnsdist",
    ) -> None:
        self.url = url
        super().__init__(
            message,
            service=service,
            what_happened=f"A DNS-over-HTTPS query to {url} failed:\n{message}",
            how_to_fix=(
                "1. Check that the domain resolves to this host\n"
                "2. Check that port 443 is reachable from this host\n"
                f"3. Inspect the gateway log: journalctl -xeu {service}"
            ),
        )
