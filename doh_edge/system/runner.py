"""
Command Runner
~~~~~~~~~~~~~~

Thin wrapper over ``subprocess.run`` used by every external collaborator:
package manager, ACME client and service supervisor.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

from doh_edge.exceptions import ExternalToolError

__all__ = ["CommandResult", "CommandRunner"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """
    Captured outcome of one external command.

    Attributes:
        args: The argument vector that was run.
        returncode: Exit status.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return shlex.join(self.args)


class CommandRunner:
    """
    Runs external commands, blocking until they exit.

    No timeout is imposed; long operations such as package installation
    and certificate issuance own their own timeouts.
    """

    def __init__(self, env: dict[str, str] | None = None) -> None:
        self._env = env or {}

    def run(
        self,
        args: Sequence[str],
        check: bool = True,
        error_cls: type[ExternalToolError] = ExternalToolError,
    ) -> CommandResult:
        """
        Run ``args`` and capture its output.

        Args:
            args: Command and arguments.
            check: Raise on a non-zero exit status.
            error_cls: The ExternalToolError subclass to raise.

        Returns:
            The captured CommandResult.

        Raises:
            ExternalToolError: If the command is missing, or exits non-zero
                while ``check`` is set.
        """
        argv = tuple(str(a) for a in args)
        command = shlex.join(argv)
        logger.debug("Running %s", command)

        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                env={**os.environ, **self._env},
                check=False,
            )
        except FileNotFoundError as exc:
            raise error_cls(
                f"Command not found: {argv[0]}",
                tool=command,
                returncode=127,
                stderr=str(exc),
            ) from exc

        result = CommandResult(
            args=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

        if check and not result.ok:
            raise error_cls(
                f"Command failed: {command}",
                tool=command,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result
