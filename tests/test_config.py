"""Tests for environment-driven configuration and its validation."""

import dataclasses

import pytest

from klipper_discovery.config import ConnectionConfig, KlipperConfig, load_config, validate_config
from klipper_discovery.exceptions import ConfigError


def _config(**overrides) -> KlipperConfig:
    base = load_config({})
    return dataclasses.replace(base, **overrides)


class TestLoadConfig:
    def test_defaults(self):
        cfg = load_config({})
        assert cfg.moonraker_host == "192.168.1.20"
        assert cfg.moonraker_port == 7125
        assert cfg.moonraker_ws_url == "ws://192.168.1.20:7125/websocket"
        assert cfg.moonraker_api_url == "http://192.168.1.20:7125"
        assert cfg.printer_name == "Discovery"
        assert cfg.connection_timeout == 5000

    def test_urls_derived_from_host_and_port(self):
        cfg = load_config({"MOONRAKER_HOST": "printer.local", "MOONRAKER_PORT": "8080"})
        assert cfg.moonraker_ws_url == "ws://printer.local:8080/websocket"
        assert cfg.moonraker_api_url == "http://printer.local:8080"

    def test_explicit_urls_win(self):
        cfg = load_config(
            {
                "MOONRAKER_HOST": "printer.local",
                "MOONRAKER_WS_URL": "ws://proxy/ws",
                "MOONRAKER_API_URL": "http://proxy/api",
                "PRINTER_NAME": "Voron",
                "CONNECTION_TIMEOUT": "2500",
            }
        )
        assert cfg.moonraker_ws_url == "ws://proxy/ws"
        assert cfg.moonraker_api_url == "http://proxy/api"
        assert cfg.printer_name == "Voron"
        assert cfg.connection_timeout == 2500

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("MOONRAKER_HOST", "10.1.1.1")
        monkeypatch.delenv("MOONRAKER_WS_URL", raising=False)
        monkeypatch.delenv("MOONRAKER_PORT", raising=False)
        assert load_config().moonraker_ws_url == "ws://10.1.1.1:7125/websocket"

    def test_bad_port(self):
        with pytest.raises(ConfigError) as excinfo:
            load_config({"MOONRAKER_PORT": "seventy"})
        assert "MOONRAKER_PORT" in excinfo.value.message

    def test_config_is_immutable(self):
        cfg = load_config({})
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.moonraker_port = 1

    def test_connection_config(self):
        cfg = load_config({"CONNECTION_TIMEOUT": "2500"})
        assert cfg.connection_config() == ConnectionConfig(
            "ws://192.168.1.20:7125/websocket", connect_timeout=2.5
        )
        assert _config(connection_timeout=0).connection_config().connect_timeout is None


class TestValidateConfig:
    def test_defaults_are_valid(self):
        assert validate_config(load_config({})) == (True, [])

    def test_missing_host(self):
        ok, errors = validate_config(_config(moonraker_host=""))
        assert not ok
        assert errors == ["Moonraker host is required"]

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_port_out_of_range(self, port):
        ok, errors = validate_config(_config(moonraker_port=port))
        assert not ok
        assert errors == ["Moonraker port must be between 1 and 65535"]

    def test_short_timeout(self):
        ok, errors = validate_config(_config(connection_timeout=500))
        assert not ok
        assert errors == ["Connection timeout should be at least 1000ms"]

    def test_zero_timeout_not_checked(self):
        assert validate_config(_config(connection_timeout=0)) == (True, [])

    def test_collects_every_error(self):
        ok, errors = validate_config(
            _config(moonraker_host="", moonraker_port=70000, connection_timeout=10)
        )
        assert not ok
        assert sorted(errors) == sorted(
            [
                "Moonraker host is required",
                "Moonraker port must be between 1 and 65535",
                "Connection timeout should be at least 1000ms",
            ]
        )
