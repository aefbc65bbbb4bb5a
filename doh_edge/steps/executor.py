"""
Step Executor
~~~~~~~~~~~~~

Runs an ordered sequence of installation steps, stopping the whole run
at the first failure.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from doh_edge.core.models import InstallationStep, JournalEntry, RunResult
from doh_edge.core.states import StepStatus
from doh_edge.exceptions import DohEdgeError, PreconditionError
from doh_edge.observability.journal import RunJournal
from doh_edge.steps.context import StepContext

__all__ = ["StepExecutor"]

logger = logging.getLogger(__name__)


class StepExecutor:
    """
    Generic, strictly sequential step runner.

    For each step, in ordinal order:

    1. Run the prerequisite check. An unmet check skips an optional step
       and aborts the run otherwise.
    2. Run ``apply``.
    3. For every service the step configures: validate the new config,
       then restart, enable and confirm the service is active. A
       validation failure aborts before any restart.

    Any DohEdgeError aborts the run with ``RunResult.failure``. Nothing is
    retried.
    """

    def __init__(self, context: StepContext, journal: RunJournal | None = None) -> None:
        self._context = context
        self._journal = journal or RunJournal()

    @property
    def journal(self) -> RunJournal:
        return self._journal

    def run(self, steps: Sequence[InstallationStep]) -> RunResult:
        """
        Execute ``steps`` in ordinal order.

        Args:
            steps: The installation steps.

        Returns:
            ``RunResult.success`` if every step completed or was skipped,
            otherwise ``RunResult.failure`` naming the first failing step.
        """
        executed: list[str] = []
        skipped: list[str] = []

        for step in sorted(steps, key=lambda s: s.ordinal):
            start = time.perf_counter()
            self._record(step, StepStatus.STARTED)
            logger.info("Step %d: %s", step.ordinal, step.description or step.name)

            try:
                if step.check is not None:
                    step.check(self._context)
            except PreconditionError as exc:
                if step.optional:
                    logger.warning("Skipping optional step %s: %s", step.name, exc)
                    self._record(step, StepStatus.SKIPPED, start, str(exc))
                    skipped.append(step.name)
                    continue
                return self._fail(step, exc, start, executed, skipped)

            try:
                step.apply(self._context)
                for service in step.services:
                    self._context.services.validate(service)
                    self._context.services.restart_and_verify(service)
            except DohEdgeError as exc:
                return self._fail(step, exc, start, executed, skipped)

            self._record(step, StepStatus.COMPLETED, start)
            executed.append(step.name)

        logger.info("All %d steps completed", len(executed))
        return RunResult.success(executed, skipped)

    def _fail(
        self,
        step: InstallationStep,
        exc: DohEdgeError,
        start: float,
        executed: list[str],
        skipped: list[str],
    ) -> RunResult:
        logger.error("Step %s failed: %s", step.name, exc.args[0] if exc.args else exc)
        self._record(step, StepStatus.FAILED, start, str(exc))
        return RunResult.failure(step.name, exc, executed, skipped)

    def _record(
        self,
        step: InstallationStep,
        status: StepStatus,
        start: float | None = None,
        detail: str = "",
    ) -> None:
        duration_ms = int((time.perf_counter() - start) * 1000) if start is not None else 0
        self._journal.write(
            JournalEntry(
                step=step.name,
                status=status.value,
                duration_ms=duration_ms,
                detail=detail,
            )
        )
