"""
Configuration Schema
~~~~~~~~~~~~~~~~~~~~

Pydantic models for validating doh-edge configuration and the per-run
operator inputs.
"""

from __future__ import annotations

import ipaddress
import re

from pydantic import BaseModel, Field, ValidationInfo, field_validator

__all__ = [
    "EdgeConfig",
    "PathsConfig",
    "PlatformConfig",
    "ResolverConfig",
    "GatewayConfig",
    "AcmeConfig",
    "ProbeConfig",
    "ServicesConfig",
    "LoggingConfig",
    "RunConfig",
]

_HOSTNAME_LABEL = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PathsConfig(BaseModel):
    """Filesystem locations the lifecycle manager reads and writes."""

    backup_root: str = "/var/backups/doh-backup"
    resolver_config: str = "/etc/unbound/unbound.conf.d/doh.conf"
    gateway_config: str = "/etc/dnsdist/dnsdist.conf"
    root_hints: str = "/var/lib/unbound/root.hints"
    resolver_state_dirs: list[str] = Field(
        default_factory=lambda: ["/var/lib/unbound", "/var/log/unbound"]
    )
    resolver_config_dir: str = "/etc/unbound"
    letsencrypt_live: str = "/etc/letsencrypt/live"
    os_release: str = "/etc/os-release"

    @field_validator("backup_root", "resolver_config", "gateway_config", "root_hints")
    @classmethod
    def validate_absolute(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"Path must be absolute: {v!r}")
        return v


class PlatformConfig(BaseModel):
    """The only OS identity the installer accepts."""

    distro: str = "ubuntu"
    version: str = "22.04"


class ResolverConfig(BaseModel):
    """Settings rendered into the Unbound configuration fragment."""

    interfaces: list[str] = Field(default_factory=lambda: ["127.0.0.1", "::1"])
    access_control: list[str] = Field(
        default_factory=lambda: ["127.0.0.0/8 allow", "::1/128 allow"]
    )
    port: int = Field(default=53, ge=1, le=65535)
    num_threads: int = Field(default=4, ge=1)
    cache_min_ttl: int = Field(default=3600, ge=0)
    cache_max_ttl: int = Field(default=86400, ge=0)
    verbosity: int = Field(default=1, ge=0, le=5)
    root_hints_url: str = "https://www.internic.net/domain/named.cache"
    owner: str = "unbound"

    @field_validator("interfaces")
    @classmethod
    def validate_interfaces(cls, v: list[str]) -> list[str]:
        for address in v:
            try:
                ipaddress.ip_address(address)
            except ValueError:
                raise ValueError(f"Invalid resolver interface: {address!r}")
        return v

    @field_validator("cache_max_ttl")
    @classmethod
    def validate_ttl_order(cls, v: int, info: ValidationInfo) -> int:
        minimum = info.data.get("cache_min_ttl", 0)
        if v < minimum:
            raise ValueError(
                f"cache_max_ttl ({v}) must not be below cache_min_ttl ({minimum})"
            )
        return v


class GatewayConfig(BaseModel):
    """Settings rendered into the dnsdist configuration."""

    listen_address: str = "0.0.0.0"
    listen_port: int = Field(default=443, ge=1, le=65535)
    doh_path: str = "/dns-query"
    upstream: str = "127.0.0.1:53"
    # dnsdist binds 127.0.0.1:53 unless told otherwise, which the resolver owns
    local_listen: str = "127.0.0.1:5300"

    @property
    def listen(self) -> str:
        return f"{self.listen_address}:{self.listen_port}"

    @field_validator("doh_path")
    @classmethod
    def validate_doh_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"DoH path must start with '/': {v!r}")
        return v


class AcmeConfig(BaseModel):
    """Certificate issuance settings."""

    http_port: int = Field(default=80, ge=1, le=65535)
    staging: bool = False


class ProbeConfig(BaseModel):
    """End-to-end DoH query settings."""

    query_name: str = "example.com"
    timeout: float = Field(default=10.0, gt=0)
    verify_tls: bool = True


class ServicesConfig(BaseModel):
    """Supervisor unit names and diagnostics."""

    resolver: str = "unbound"
    gateway: str = "dnsdist"
    log_tail_lines: int = Field(default=20, ge=1)


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v!r}")
        return level


class EdgeConfig(BaseModel):
    """
    Root configuration model for doh-edge.

    Validated on load with clear error messages for invalid values.
    """

    version: str = "1.0"
    paths: PathsConfig = Field(default_factory=PathsConfig)
    platform: PlatformConfig = Field(default_factory=PlatformConfig)
    packages: list[str] = Field(
        default_factory=lambda: ["unbound", "dnsdist", "certbot"]
    )
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    acme: AcmeConfig = Field(default_factory=AcmeConfig)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    services: ServicesConfig = Field(default_factory=ServicesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class RunConfig(BaseModel):
    """
    Operator inputs for one installation run.

    Built once when the run starts and handed to every step; nothing
    downstream reads the domain or email from anywhere else.
    """

    domain: str
    email: str

    model_config = {"frozen": True}

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        domain = v.strip().rstrip(".").lower()
        labels = domain.split(".")
        if len(domain) > 253 or len(labels) < 2:
            raise ValueError(f"Not a fully qualified domain name: {v!r}")
        for label in labels:
            if not _HOSTNAME_LABEL.match(label):
                raise ValueError(f"Invalid domain label {label!r} in {v!r}")
        return domain

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        email = v.strip()
        if not _EMAIL.match(email):
            raise ValueError(f"Invalid email address: {v!r}")
        return email
