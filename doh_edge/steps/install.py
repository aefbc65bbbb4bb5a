"""
Installation Steps
~~~~~~~~~~~~~~~~~~

The fixed, ordered step list that provisions the DoH edge, and the
static set of paths those steps manage.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from doh_edge.config.schema import EdgeConfig
from doh_edge.core.models import InstallationStep, ManagedPath
from doh_edge.core.states import Idempotency
from doh_edge.exceptions import ManagedWriteError
from doh_edge.probe import DohProbe
from doh_edge.steps.context import StepContext

__all__ = ["build_install_steps", "managed_paths"]

logger = logging.getLogger(__name__)

RESOLVER = "resolver"
GATEWAY = "gateway"


def managed_paths(config: EdgeConfig) -> list[ManagedPath]:
    """Every path the installation steps may overwrite."""
    return [
        ManagedPath(Path(config.paths.resolver_config), RESOLVER),
        ManagedPath(Path(config.paths.root_hints), RESOLVER),
        ManagedPath(Path(config.paths.gateway_config), GATEWAY),
    ]


# ── Step bodies ──────────────────────────────────────────────────


def reinstall_packages(ctx: StepContext) -> None:
    for package in ctx.config.packages:
        ctx.packages.reinstall(package)


def prepare_resolver(ctx: StepContext) -> None:
    """Root hints, state directories, ownership and modes for Unbound."""
    paths = ctx.config.paths
    resolver = ctx.config.resolver

    for directory in paths.resolver_state_dirs:
        try:
            Path(directory).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ManagedWriteError(f"Failed to create {directory}: {exc}") from exc

    hints = Path(paths.root_hints)
    if not hints.exists():
        logger.info("Downloading root hints from %s", resolver.root_hints_url)
        try:
            response = ctx.http.get(resolver.root_hints_url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ManagedWriteError(
                f"Failed to download root hints from {resolver.root_hints_url}: {exc}"
            ) from exc
        ctx.writer.write(ManagedPath(hints, RESOLVER), response.content)

    owned = [paths.resolver_config_dir, *paths.resolver_state_dirs]
    ctx.runner.run(["chown", "-R", f"{resolver.owner}:{resolver.owner}", *owned])
    ctx.runner.run(["chmod", "-R", "755", *owned])


def write_resolver_config(ctx: StepContext) -> None:
    path = Path(ctx.config.paths.resolver_config)
    ctx.writer.write(ManagedPath(path, RESOLVER), ctx.renderer.resolver_config())


def require_http_port(ctx: StepContext) -> None:
    if ctx.acme.paths_for(ctx.run.domain).exist():
        return
    ctx.preflight.assert_port_available(ctx.acme.http_port)


def obtain_certificate(ctx: StepContext) -> None:
    ctx.certificate = ctx.acme.obtain(ctx.run.domain, ctx.run.email)


def write_gateway_config(ctx: StepContext) -> None:
    cert = ctx.certificate or ctx.acme.paths_for(ctx.run.domain)
    path = Path(ctx.config.paths.gateway_config)
    ctx.writer.write(
        ManagedPath(path, GATEWAY), ctx.renderer.gateway_config(ctx.run, cert)
    )


def probe_endpoint(ctx: StepContext) -> None:
    gateway = ctx.config.gateway
    port = "" if gateway.listen_port == 443 else f":{gateway.listen_port}"
    url = f"https://{ctx.run.domain}{port}{gateway.doh_path}"
    DohProbe(ctx.http, ctx.config.probe.query_name).check(url)


# ── Step list ────────────────────────────────────────────────────


def build_install_steps(config: EdgeConfig) -> list[InstallationStep]:
    """
    Return the installation steps in execution order.

    Args:
        config: Host configuration; decides which services each step
            validates and restarts.
    """
    return [
        InstallationStep(
            name="packages",
            ordinal=1,
            apply=reinstall_packages,
            idempotency=Idempotency.DESTRUCTIVE_REINSTALL,
            description=f"Reinstall {', '.join(config.packages)}",
        ),
        InstallationStep(
            name="resolver-prepare",
            ordinal=2,
            apply=prepare_resolver,
            description="Prepare resolver root hints and directories",
        ),
        InstallationStep(
            name="resolver-config",
            ordinal=3,
            apply=write_resolver_config,
            services=(RESOLVER,),
            description="Configure, validate and restart the resolver",
        ),
        InstallationStep(
            name="certificate",
            ordinal=4,
            apply=obtain_certificate,
            check=require_http_port,
            description="Obtain a TLS certificate",
        ),
        InstallationStep(
            name="gateway-config",
            ordinal=5,
            apply=write_gateway_config,
            services=(GATEWAY,),
            description="Configure, validate and restart the DoH gateway",
        ),
        InstallationStep(
            name="end-to-end",
            ordinal=6,
            apply=probe_endpoint,
            description="Query the DoH endpoint end to end",
        ),
    ]
