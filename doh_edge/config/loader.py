"""
Configuration Loader
~~~~~~~~~~~~~~~~~~~~

Reads the host YAML config over the built-in defaults, and validates the
operator's per-run inputs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pydantic
import yaml

from doh_edge.config.defaults import DEFAULT_CONFIG
from doh_edge.config.schema import EdgeConfig, RunConfig
from doh_edge.exceptions import (
    ConfigFileNotFoundError,
    ConfigValidationError,
)

__all__ = ["load_config", "load_config_from_dict", "make_run_config"]

logger = logging.getLogger(__name__)


def _deep_merge(base: dict, override: dict) -> dict:
    """Return ``base`` with ``override`` layered on top, section by section."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _describe(exc: pydantic.ValidationError) -> str:
    """One ``section.field: message`` line per rejected value."""
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "(root)"
        lines.append(f"{location}: {error['msg']}")
    return "\n".join(lines)


def load_config(path: str | Path) -> EdgeConfig:
    """
    Load the host configuration from a YAML file.

    Sections missing from the file keep their defaults; a section that is
    present only overrides the keys it names.

    Raises:
        ConfigFileNotFoundError: If ``path`` does not exist.
        ConfigValidationError: If the YAML is malformed, is not a
            mapping, or holds invalid values.
    """
    source = Path(path)
    if not source.is_file():
        raise ConfigFileNotFoundError(f"Configuration file not found: {source}")

    try:
        user_config = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigValidationError(
            f"Invalid YAML in {source}: {exc}", details={"path": str(source)}
        ) from exc

    if not isinstance(user_config, dict):
        raise ConfigValidationError(
            f"{source} must contain a mapping, got {type(user_config).__name__}",
            details={"path": str(source)},
        )

    logger.debug("Loaded configuration overrides from %s", source)
    return load_config_from_dict(user_config)


def load_config_from_dict(data: dict[str, Any]) -> EdgeConfig:
    """
    Build an EdgeConfig from ``data`` layered over ``DEFAULT_CONFIG``.

    Raises:
        ConfigValidationError: If any value is rejected.
    """
    try:
        return EdgeConfig.model_validate(_deep_merge(DEFAULT_CONFIG, data))
    except pydantic.ValidationError as exc:
        raise ConfigValidationError(
            f"Invalid configuration:\n{_describe(exc)}",
            details={"errors": exc.error_count()},
        ) from exc


def make_run_config(domain: str, email: str) -> RunConfig:
    """
    Validate the operator's per-run inputs.

    Raises:
        ConfigValidationError: If the domain or email is malformed.
    """
    try:
        return RunConfig(domain=domain, email=email)
    except pydantic.ValidationError as exc:
        raise ConfigValidationError(f"Invalid run inputs:\n{_describe(exc)}") from exc
