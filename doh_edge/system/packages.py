"""
Package Manager
~~~~~~~~~~~~~~~

dpkg/apt adapter: query, purge and install Debian packages.
"""

from __future__ import annotations

import logging

from doh_edge.exceptions import PackageError
from doh_edge.system.runner import CommandRunner

__all__ = ["PackageManager"]

logger = logging.getLogger(__name__)


class PackageManager:
    """Installs and removes packages through apt, non-interactively."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def is_installed(self, package: str) -> bool:
        """Return True if dpkg reports ``package`` as installed."""
        result = self._runner.run(["dpkg", "-s", package], check=False)
        return result.ok

    def purge(self, package: str) -> None:
        logger.info("Purging existing installation of %s", package)
        self._runner.run(["apt-get", "purge", "-y", package], error_cls=PackageError)

    def install(self, package: str) -> None:
        logger.info("Installing %s", package)
        self._runner.run(["apt-get", "install", "-y", package], error_cls=PackageError)

    def reinstall(self, package: str) -> None:
        """
        Converge ``package`` to a fresh install regardless of current state.

        Purges first when the package is already present, so a repeated
        run reinstalls rather than erroring on an existing installation.

        Raises:
            PackageError: If apt fails.
        """
        if self.is_installed(package):
            self.purge(package)
        self.install(package)
