"""Runtime configuration for Agent Dashboard, sourced from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9999
DEFAULT_REFRESH_SECONDS = 30.0
DEFAULT_PROBE_TIMEOUT = 5.0


def _default_root() -> Path:
    return Path.home() / "gits"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number), using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r (must be positive), using %s", name, raw, default)
        return default
    return value


def _env_int(name: str, default: int, minimum: int = 1, maximum: int = 65535) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not an integer), using %d", name, raw, default)
        return default
    if not minimum <= value <= maximum:
        logger.warning(
            "Ignoring %s=%r (must be between %d and %d), using %d",
            name, raw, minimum, maximum, default,
        )
        return default
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


@dataclass
class DashboardConfig:
    """Dashboard settings.

    ``gits_dir`` is the watched root; every ``<name>-<n>`` git checkout
    directly below it is treated as one agent.
    """

    gits_dir: Path = field(default_factory=_default_root)
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    refresh_seconds: float = DEFAULT_REFRESH_SECONDS
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    live_reload: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> DashboardConfig:
        gits_dir = os.environ.get("GITS_DIR")
        level = os.environ.get("AGENT_DASHBOARD_LOG_LEVEL", "INFO").strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            logger.warning("Unknown AGENT_DASHBOARD_LOG_LEVEL %r, using INFO", level)
            level = "INFO"
        return cls(
            gits_dir=Path(gits_dir).expanduser() if gits_dir else _default_root(),
            host=os.environ.get("AGENT_DASHBOARD_HOST", "0.0.0.0"),
            port=_env_int("AGENT_DASHBOARD_PORT", DEFAULT_PORT),
            refresh_seconds=_env_float("AGENT_DASHBOARD_REFRESH_SECONDS", DEFAULT_REFRESH_SECONDS),
            probe_timeout=_env_float("AGENT_DASHBOARD_PROBE_TIMEOUT", DEFAULT_PROBE_TIMEOUT),
            live_reload=_env_bool("AGENT_DASHBOARD_LIVE_RELOAD", True),
            log_level=level,
        )
