"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

from agent_dashboard.config import DashboardConfig

_VARS = (
    "GITS_DIR",
    "AGENT_DASHBOARD_HOST",
    "AGENT_DASHBOARD_PORT",
    "AGENT_DASHBOARD_REFRESH_SECONDS",
    "AGENT_DASHBOARD_PROBE_TIMEOUT",
    "AGENT_DASHBOARD_LIVE_RELOAD",
    "AGENT_DASHBOARD_LOG_LEVEL",
)


def _clear(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    cfg = DashboardConfig.from_env()
    assert cfg.gits_dir == Path.home() / "gits"
    assert cfg.port == 9999
    assert cfg.refresh_seconds == 30.0
    assert cfg.probe_timeout == 5.0
    assert cfg.live_reload is True
    assert cfg.log_level == "INFO"


def test_overrides(monkeypatch, tmp_path):
    _clear(monkeypatch)
    monkeypatch.setenv("GITS_DIR", str(tmp_path))
    monkeypatch.setenv("AGENT_DASHBOARD_PORT", "8080")
    monkeypatch.setenv("AGENT_DASHBOARD_REFRESH_SECONDS", "12.5")
    monkeypatch.setenv("AGENT_DASHBOARD_LIVE_RELOAD", "off")
    monkeypatch.setenv("AGENT_DASHBOARD_LOG_LEVEL", "debug")
    cfg = DashboardConfig.from_env()
    assert cfg.gits_dir == tmp_path
    assert cfg.port == 8080
    assert cfg.refresh_seconds == 12.5
    assert cfg.live_reload is False
    assert cfg.log_level == "DEBUG"


def test_invalid_values_fall_back(monkeypatch, caplog):
    _clear(monkeypatch)
    monkeypatch.setenv("AGENT_DASHBOARD_PORT", "nine")
    monkeypatch.setenv("AGENT_DASHBOARD_PROBE_TIMEOUT", "-1")
    monkeypatch.setenv("AGENT_DASHBOARD_LOG_LEVEL", "chatty")
    cfg = DashboardConfig.from_env()
    assert cfg.port == 9999
    assert cfg.probe_timeout == 5.0
    assert cfg.log_level == "INFO"
    assert "AGENT_DASHBOARD_PORT" in caplog.text


def test_out_of_range_port_falls_back(monkeypatch, caplog):
    for raw in ("0", "-5", "70000"):
        _clear(monkeypatch)
        caplog.clear()
        monkeypatch.setenv("AGENT_DASHBOARD_PORT", raw)
        cfg = DashboardConfig.from_env()
        assert cfg.port == 9999
        assert "must be between 1 and 65535" in caplog.text


def test_port_range_bounds_accepted(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("AGENT_DASHBOARD_PORT", "65535")
    assert DashboardConfig.from_env().port == 65535
    monkeypatch.setenv("AGENT_DASHBOARD_PORT", "1")
    assert DashboardConfig.from_env().port == 1
