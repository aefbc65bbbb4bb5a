"""
Config Renderer
~~~~~~~~~~~~~~~

Renders the resolver and gateway configuration files from Jinja2
templates shipped in ``doh_edge/templates``.
"""

from __future__ import annotations

from pathlib import Path

import jinja2

from doh_edge.config.schema import EdgeConfig, RunConfig
from doh_edge.system.acme import CertificatePaths

__all__ = ["ConfigRenderer"]

_TEMPLATE_DIR = Path(__file__).parent / "templates"


class ConfigRenderer:
    """
    Produces complete config file bodies. Output depends only on its
    inputs, so re-rendering for the same run is byte-identical.
    """

    def __init__(self, config: EdgeConfig, template_dir: str | Path | None = None) -> None:
        self._config = config
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir or _TEMPLATE_DIR)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
        )

    def resolver_config(self) -> str:
        """Render the Unbound ``server:`` fragment."""
        template = self._env.get_template("unbound.conf.j2")
        return template.render(
            resolver=self._config.resolver,
            root_hints=self._config.paths.root_hints,
        )

    def gateway_config(self, run: RunConfig, cert: CertificatePaths) -> str:
        """Render the dnsdist configuration for one domain."""
        template = self._env.get_template("dnsdist.conf.j2")
        return template.render(
            gateway=self._config.gateway,
            domain=run.domain,
            email=run.email,
            cert=cert,
        )
