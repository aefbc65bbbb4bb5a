"""Tests for config rendering."""

from pathlib import Path

from doh_edge.config.loader import load_config_from_dict
from doh_edge.render import ConfigRenderer
from doh_edge.system.acme import CertificatePaths

CERT = CertificatePaths(
    fullchain=Path("/etc/letsencrypt/live/doh.example.com/fullchain.pem"),
    privkey=Path("/etc/letsencrypt/live/doh.example.com/privkey.pem"),
)


class TestResolverConfig:
    def test_binds_localhost_only(self):
        text = ConfigRenderer(load_config_from_dict({})).resolver_config()

        assert text.startswith("# Managed by doh-edge")
        assert "    interface: 127.0.0.1\n" in text
        assert "    interface: ::1\n" in text
        assert "0.0.0.0" not in text
        assert "    access-control: 127.0.0.0/8 allow\n" in text
        assert '    root-hints: "/var/lib/unbound/root.hints"\n' in text

    def test_settings_are_rendered(self):
        config = load_config_from_dict(
            {"resolver": {"num_threads": 2, "cache_min_ttl": 60, "cache_max_ttl": 600}}
        )
        text = ConfigRenderer(config).resolver_config()
        assert "    num-threads: 2\n" in text
        assert "    cache-min-ttl: 60\n" in text
        assert "    cache-max-ttl: 600\n" in text

    def test_rendering_is_deterministic(self):
        renderer = ConfigRenderer(load_config_from_dict({}))
        assert renderer.resolver_config() == renderer.resolver_config()


class TestGatewayConfig:
    def test_embeds_domain_and_certificate(self, run_config):
        text = ConfigRenderer(load_config_from_dict({})).gateway_config(run_config, CERT)

        assert "-- Domain: doh.example.com\n" in text
        assert "-- Operator contact: ops@example.com\n" in text
        assert 'setLocal("127.0.0.1:5300")' in text
        assert 'newServer({address="127.0.0.1:53"})' in text
        assert (
            'addDOHLocal("0.0.0.0:443", '
            '"/etc/letsencrypt/live/doh.example.com/fullchain.pem", '
            '"/etc/letsencrypt/live/doh.example.com/privkey.pem", '
            '"/dns-query")'
        ) in text
        assert text.count("newServer(") == 1
        assert text.count("addDOHLocal(") == 1
        assert text.count('"/dns-query"') == 1

    def test_custom_listener(self, run_config):
        config = load_config_from_dict(
            {"gateway": {"listen_port": 8443, "doh_path": "/q"}}
        )
        text = ConfigRenderer(config).gateway_config(run_config, CERT)
        assert 'addDOHLocal("0.0.0.0:8443"' in text
        assert '"/q")' in text

    def test_custom_template_dir(self, tmp_path, run_config):
        (tmp_path / "dnsdist.conf.j2").write_text("-- {{ domain }}\n")
        renderer = ConfigRenderer(load_config_from_dict({}), template_dir=tmp_path)
        assert renderer.gateway_config(run_config, CERT) == "-- doh.example.com\n"
