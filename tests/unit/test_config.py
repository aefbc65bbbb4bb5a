"""Tests for configuration loading and run inputs."""

import pytest

from doh_edge.config.loader import (
    _deep_merge,
    load_config,
    load_config_from_dict,
    make_run_config,
)
from doh_edge.exceptions import ConfigFileNotFoundError, ConfigValidationError


class TestLoadConfig:
    def test_defaults(self):
        config = load_config_from_dict({})
        assert config.paths.backup_root == "/var/backups/doh-backup"
        assert config.platform.version == "22.04"
        assert config.packages == ["unbound", "dnsdist", "certbot"]
        assert config.resolver.interfaces == ["127.0.0.1", "::1"]
        assert config.gateway.listen == "0.0.0.0:443"

    def test_yaml_overrides_merge_with_defaults(self, tmp_path):
        path = tmp_path / "doh-edge.yaml"
        path.write_text(
            "gateway:\n"
            "  listen_port: 8443\n"
            "acme:\n"
            "  staging: true\n"
        )

        config = load_config(str(path))

        assert config.gateway.listen_port == 8443
        assert config.gateway.doh_path == "/dns-query"
        assert config.acme.staging is True

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)).services.gateway == "dnsdist"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("gateway: [unclosed\n")
        with pytest.raises(ConfigValidationError):
            load_config(str(path))

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigValidationError, match="mapping"):
            load_config(str(path))

    @pytest.mark.parametrize(
        "override",
        [
            {"paths": {"backup_root": "relative/backups"}},
            {"resolver": {"interfaces": ["localhost"]}},
            {"resolver": {"cache_min_ttl": 100, "cache_max_ttl": 10}},
            {"gateway": {"doh_path": "dns-query"}},
            {"gateway": {"listen_port": 70000}},
            {"logging": {"level": "LOUD"}},
        ],
    )
    def test_invalid_values(self, override):
        with pytest.raises(ConfigValidationError):
            load_config_from_dict(override)

    def test_error_names_the_field(self):
        with pytest.raises(ConfigValidationError, match=r"gateway\.listen_port"):
            load_config_from_dict({"gateway": {"listen_port": 70000}})

    def test_deep_merge_keeps_siblings(self):
        merged = _deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        assert merged == {"a": {"x": 1, "y": 3}}


class TestRunConfig:
    def test_domain_is_normalized(self):
        run = make_run_config("  DoH.Example.COM. ", "ops@example.com")
        assert run.domain == "doh.example.com"

    @pytest.mark.parametrize(
        "domain", ["", "localhost", "bad_label.example.com", "-x.example.com"]
    )
    def test_invalid_domain(self, domain):
        with pytest.raises(ConfigValidationError):
            make_run_config(domain, "ops@example.com")

    @pytest.mark.parametrize("email", ["", "ops", "ops@", "ops@example"])
    def test_invalid_email(self, email):
        with pytest.raises(ConfigValidationError):
            make_run_config("doh.example.com", email)

    def test_frozen(self, run_config):
        with pytest.raises(Exception):
            run_config.domain = "other.example.com"
