"""doh-edge configuration: loading, validation and defaults."""

from doh_edge.config.defaults import DEFAULT_CONFIG
from doh_edge.config.loader import load_config, load_config_from_dict, make_run_config
from doh_edge.config.schema import EdgeConfig, RunConfig

__all__ = [
    "load_config",
    "load_config_from_dict",
    "make_run_config",
    "EdgeConfig",
    "RunConfig",
    "DEFAULT_CONFIG",
]
