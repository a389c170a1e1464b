"""Tests for RegistryConfig loading."""

from __future__ import annotations

import json

from waypoint.config import RegistryConfig


class TestDefaults:
    def test_defaults(self):
        cfg = RegistryConfig()
        assert cfg.partition == "global"
        assert cfg.health_timeout == 5.0
        assert cfg.port == 5200


class TestFromEnv:
    def test_reads_and_coerces(self, monkeypatch):
        monkeypatch.setenv("WAYPOINT_PORT", "6000")
        monkeypatch.setenv("WAYPOINT_HEALTH_TIMEOUT", "2.5")
        monkeypatch.setenv("WAYPOINT_PARTITION", "east")
        cfg = RegistryConfig.from_env()
        assert cfg.port == 6000
        assert cfg.health_timeout == 2.5
        assert cfg.partition == "east"

    def test_empty_values_ignored(self, monkeypatch):
        monkeypatch.setenv("WAYPOINT_HOST", "")
        monkeypatch.delenv("WAYPOINT_PORT", raising=False)
        cfg = RegistryConfig.from_env()
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 5200


class TestLoad:
    def test_load_json_ignores_unknown_keys(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"port": "7000", "relay_timeout": 3, "bogus": True}))
        cfg = RegistryConfig.load(path)
        assert cfg.port == 7000
        assert cfg.relay_timeout == 3.0
        assert isinstance(cfg.relay_timeout, float)

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = RegistryConfig.load(tmp_path / "nope.json")
        assert cfg == RegistryConfig()
