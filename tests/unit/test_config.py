"""Tests for run parameters, target parsing and environment configuration."""

from __future__ import annotations

import pytest

from stressload._internal.config import (
    DEFAULT_DNS_SERVERS,
    RunConfig,
    StressLoadConfig,
    Target,
    load_config,
    parse_target,
    validate_dns_servers,
)
from stressload._internal.errors import ConfigError


class TestParseTarget:
    """Tests for parse_target and Target.url_for."""

    def test_full_url(self):
        target = parse_target("http://example.com:8080/index.html?q=1")
        assert target == Target(
            scheme="http", host="example.com", port=8080, path="/index.html", query="q=1"
        )

    def test_defaults_path_to_root(self):
        target = parse_target("https://example.com")
        assert target.path == "/"
        assert target.port is None
        assert target.scheme == "https"

    def test_url_for_substitutes_address(self):
        target = parse_target("http://example.com/a/b")
        assert target.url_for("10.1.2.3") == "http://10.1.2.3/a/b"

    def test_url_for_keeps_port_and_query(self):
        target = parse_target("http://example.com:8080/a?x=1")
        assert target.url_for("10.1.2.3") == "http://10.1.2.3:8080/a?x=1"

    def test_empty_url_raises(self):
        with pytest.raises(ConfigError, match="Not enough arguments"):
            parse_target("")

    @pytest.mark.parametrize("url", ["ftp://example.com/", "example.com/index.html", "://x"])
    def test_unsupported_scheme_raises(self, url: str):
        with pytest.raises(ConfigError, match="scheme"):
            parse_target(url)

    def test_missing_host_raises(self):
        with pytest.raises(ConfigError, match="no host"):
            parse_target("http:///path")

    def test_invalid_port_raises(self):
        with pytest.raises(ConfigError, match="Invalid target URL"):
            parse_target("http://example.com:notaport/")

    def test_target_is_frozen(self):
        target = parse_target("http://example.com/")
        with pytest.raises(AttributeError):
            target.host = "other"  # type: ignore[misc]


class TestRunConfig:
    """Tests for RunConfig defaults and validation."""

    def test_defaults(self):
        config = RunConfig(url="http://example.com/")
        assert config.concurrency == 10
        assert config.duration_seconds == 60.0
        assert config.delay_seconds == 1.0
        assert config.benchmark is False
        assert config.quiet is False

    def test_validate_returns_target(self):
        target = RunConfig(url="http://example.com/x").validate()
        assert target.host == "example.com"
        assert target.path == "/x"

    def test_zero_concurrency_raises(self):
        with pytest.raises(ConfigError, match="concurrency must be >= 1"):
            RunConfig(url="http://example.com/", concurrency=0).validate()

    def test_non_positive_duration_raises(self):
        with pytest.raises(ConfigError, match="duration must be positive"):
            RunConfig(url="http://example.com/", duration_seconds=0).validate()

    def test_negative_delay_raises(self):
        with pytest.raises(ConfigError, match="delay must be >= 0"):
            RunConfig(url="http://example.com/", delay_seconds=-0.5).validate()

    def test_zero_delay_allowed(self):
        RunConfig(url="http://example.com/", delay_seconds=0.0).validate()

    def test_missing_url_raises(self):
        with pytest.raises(ConfigError, match="Not enough arguments"):
            RunConfig(url="").validate()


class TestLoadConfig:
    """Tests for the load_config function."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch: pytest.MonkeyPatch):
        for name in ("STRESSLOAD_TIMEOUT", "STRESSLOAD_DNS_TIMEOUT", "STRESSLOAD_DNS_SERVERS"):
            monkeypatch.delenv(name, raising=False)

    def test_defaults_from_env(self):
        config = load_config()
        assert config == StressLoadConfig()
        assert config.request_timeout == 30.0
        assert config.dns_timeout == 2.0
        assert config.dns_servers == DEFAULT_DNS_SERVERS

    def test_default_pool_has_24_servers(self):
        assert len(DEFAULT_DNS_SERVERS) == 24
        assert len(set(DEFAULT_DNS_SERVERS)) == 24

    def test_timeouts_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STRESSLOAD_TIMEOUT", "10.5")
        monkeypatch.setenv("STRESSLOAD_DNS_TIMEOUT", "0.5")
        config = load_config()
        assert config.request_timeout == 10.5
        assert config.dns_timeout == 0.5

    def test_dns_servers_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STRESSLOAD_DNS_SERVERS", "10.0.0.1, 10.0.0.2,,")
        assert load_config().dns_servers == ("10.0.0.1", "10.0.0.2")

    @pytest.mark.parametrize("value", ["not-an-ip,10.0.0.1", "10.0.0.1,dns.example.com"])
    def test_non_ip_dns_server_raises(self, monkeypatch: pytest.MonkeyPatch, value: str):
        monkeypatch.setenv("STRESSLOAD_DNS_SERVERS", value)
        with pytest.raises(ConfigError, match="STRESSLOAD_DNS_SERVERS entries must be IP addresses"):
            load_config()

    def test_ipv6_dns_server_allowed(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STRESSLOAD_DNS_SERVERS", "::1,10.0.0.1")
        assert load_config().dns_servers == ("::1", "10.0.0.1")

    def test_empty_dns_servers_raises(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STRESSLOAD_DNS_SERVERS", " , ")
        with pytest.raises(ConfigError, match="at least one server"):
            load_config()

    def test_invalid_timeout_raises(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STRESSLOAD_TIMEOUT", "abc")
        with pytest.raises(ConfigError, match="must be a number"):
            load_config()

    def test_zero_dns_timeout_raises(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STRESSLOAD_DNS_TIMEOUT", "0")
        with pytest.raises(ConfigError, match="must be positive"):
            load_config()

    def test_frozen(self):
        config = load_config()
        with pytest.raises(AttributeError):
            config.request_timeout = 1.0  # type: ignore[misc]


class TestValidateDnsServers:
    """Tests for validate_dns_servers."""

    def test_returns_tuple(self):
        assert validate_dns_servers(["10.0.0.1", "10.0.0.2"]) == ("10.0.0.1", "10.0.0.2")

    def test_names_the_source_in_errors(self):
        with pytest.raises(ConfigError, match="--dns-server entries"):
            validate_dns_servers(["resolver.local"], "--dns-server")
