"""doh-edge installation steps and the executor that runs them."""

from doh_edge.steps.context import StepContext
from doh_edge.steps.executor import StepExecutor
from doh_edge.steps.install import build_install_steps, managed_paths

__all__ = [
    "StepContext",
    "StepExecutor",
    "build_install_steps",
    "managed_paths",
]
