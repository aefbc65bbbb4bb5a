"""
Preflight Guard
~~~~~~~~~~~~~~~

Environment checks that gate both installation and rollback.
"""

from __future__ import annotations

import logging
import os
import shlex
import socket
from collections.abc import Callable
from pathlib import Path

from doh_edge.exceptions import PreconditionError

__all__ = ["PreflightGuard", "read_os_release"]

logger = logging.getLogger(__name__)


def read_os_release(path: str | Path = "/etc/os-release") -> dict[str, str]:
    """
    Parse an os-release file into a dict.

    Raises:
        PreconditionError: If the file is missing or unreadable.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise PreconditionError(
            "Cannot determine the operating system.",
            details={"path": str(path)},
        ) from exc

    fields: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        parts = shlex.split(value) if value else [""]
        fields[key.strip()] = parts[0] if parts else ""
    return fields


class PreflightGuard:
    """
    Privilege, OS identity and port checks.

    Each ``assert_*`` raises PreconditionError with an operator-facing
    message when unmet; callers exit non-zero on it.

    Args:
        os_release: Path to the os-release file.
        geteuid: Returns the effective uid; injectable for tests.
    """

    def __init__(
        self,
        os_release: str | Path = "/etc/os-release",
        geteuid: Callable[[], int] = os.geteuid,
    ) -> None:
        self._os_release = Path(os_release)
        self._geteuid = geteuid

    def assert_root(self) -> None:
        if self._geteuid() != 0:
            raise PreconditionError("This command must be run as root. Use sudo.")
        logger.debug("Running as root")

    def assert_os(self, expected_distro: str, expected_version: str) -> None:
        fields = read_os_release(self._os_release)
        distro = fields.get("ID", "")
        version = fields.get("VERSION_ID", "")
        if distro != expected_distro or version != expected_version:
            detected = fields.get("PRETTY_NAME") or f"{distro} {version}".strip()
            raise PreconditionError(
                f"This installer is designed for {expected_distro} {expected_version}. "
                f"Detected: {detected or 'unknown'}",
                details={"id": distro, "version_id": version},
            )
        logger.debug("Detected %s %s", distro, version)

    def assert_port_available(self, port: int, host: str = "0.0.0.0") -> None:
        """Fail if nothing can bind ``host:port`` right now."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                sock.bind((host, port))
            except OSError as exc:
                raise PreconditionError(
                    f"Port {port} on {host} is already in use: {exc.strerror}",
                    details={"port": port, "host": host},
                ) from exc
        logger.debug("Port %d on %s is available", port, host)
