"""Tests for healthnet.config: Settings defaults, env override, servers file."""

from __future__ import annotations

import textwrap

import pytest


class TestSettings:
    def test_default_values(self):
        from healthnet.config import Settings
        s = Settings()
        assert s.app_name == "healthnet"
        assert s.listen_host == "0.0.0.0"
        assert s.listen_port == 9999
        assert s.servers == ["127.0.0.1:9999"]
        assert s.servers_file is None
        assert s.dial_timeout == 5.0
        assert s.read_timeout == 10.0
        assert s.max_payload_bytes == 1 << 20

    def test_env_prefix(self):
        from healthnet.config import Settings
        assert Settings.model_config["env_prefix"] == "HEALTHNET_"

    def test_env_override(self, monkeypatch):
        from healthnet.config import Settings
        monkeypatch.setenv("HEALTHNET_LISTEN_PORT", "7000")
        monkeypatch.setenv("HEALTHNET_SERVERS", '["a:1", "b:2"]')
        s = Settings()
        assert s.listen_port == 7000
        assert s.servers == ["a:1", "b:2"]

    def test_env_servers_comma_separated(self, monkeypatch):
        from healthnet.config import Settings
        monkeypatch.setenv("HEALTHNET_SERVERS", "web-01:9999, web-02:9999,")
        assert Settings().servers == ["web-01:9999", "web-02:9999"]


class TestServerAddresses:
    def test_from_settings_list(self):
        from healthnet.config import Settings, load_server_addresses
        s = Settings(servers=[" a:1 ", "", "b:2"])
        assert load_server_addresses(s) == ["a:1", "b:2"]

    def test_servers_file_wins(self, tmp_path):
        from healthnet.config import Settings, load_server_addresses
        path = tmp_path / "servers.yaml"
        path.write_text(textwrap.dedent("""\
            servers:
              - web-01:9999
              - web-02:9999
        """))
        s = Settings(servers=["ignored:1"], servers_file=str(path))
        assert load_server_addresses(s) == ["web-01:9999", "web-02:9999"]

    def test_bare_list_file(self, tmp_path):
        from healthnet.config import load_servers_file
        path = tmp_path / "servers.yaml"
        path.write_text("- a:1\n- ''\n- b:2\n")
        assert load_servers_file(path) == ["a:1", "b:2"]

    def test_invalid_file_shape(self, tmp_path):
        from healthnet.config import load_servers_file
        path = tmp_path / "servers.yaml"
        path.write_text("servers: web-01:9999\n")
        with pytest.raises(ValueError):
            load_servers_file(path)

    def test_missing_file(self, tmp_path):
        from healthnet.config import load_servers_file
        with pytest.raises(FileNotFoundError):
            load_servers_file(tmp_path / "nope.yaml")
