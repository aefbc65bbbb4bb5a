"""
Default Configuration
~~~~~~~~~~~~~~~~~~~~~

Defaults for an Ubuntu 22.04 host running Unbound behind dnsdist.
"""

from __future__ import annotations

__all__ = ["DEFAULT_CONFIG"]

DEFAULT_CONFIG: dict = {
    "version": "1.0",
    "paths": {
        "backup_root": "/var/backups/doh-backup",
        "resolver_config": "/etc/unbound/unbound.conf.d/doh.conf",
        "gateway_config": "/etc/dnsdist/dnsdist.conf",
        "root_hints": "/var/lib/unbound/root.hints",
        "resolver_state_dirs": ["/var/lib/unbound", "/var/log/unbound"],
        "resolver_config_dir": "/etc/unbound",
        "letsencrypt_live": "/etc/letsencrypt/live",
        "os_release": "/etc/os-release",
    },
    "platform": {
        "distro": "ubuntu",
        "version": "22.04",
    },
    "packages": ["unbound", "dnsdist", "certbot"],
    "resolver": {
        "interfaces": ["127.0.0.1", "::1"],
        "access_control": ["127.0.0.0/8 allow", "::1/128 allow"],
        "port": 53,
        "num_threads": 4,
        "cache_min_ttl": 3600,
        "cache_max_ttl": 86400,
        "verbosity": 1,
        "root_hints_url": "https://www.internic.net/domain/named.cache",
        "owner": "unbound",
    },
    "gateway": {
        "listen_address": "0.0.0.0",
        "listen_port": 443,
        "doh_path": "/dns-query",
        "upstream": "127.0.0.1:53",
        "local_listen": "127.0.0.1:5300",
    },
    "acme": {
        "http_port": 80,
        "staging": False,
    },
    "probe": {
        "query_name": "example.com",
        "timeout": 10.0,
        "verify_tls": True,
    },
    "services": {
        "resolver": "unbound",
        "gateway": "dnsdist",
        "log_tail_lines": 20,
    },
    "logging": {
        "level": "INFO",
    },
}
