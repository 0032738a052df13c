"""agent_dashboard.scanner — build one :class:`ScanSnapshot` of all agents.

Exports:
    AgentScanner        — composes discovery, port correlation and metadata
    scan                — one-shot scan using configuration from the environment
    find_agent_directories
    correlate_servers
"""

from __future__ import annotations

import logging
import socket
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from agent_dashboard.config import DashboardConfig
from agent_dashboard.models import AgentRecord, ScanSnapshot, ServerRecord
from agent_dashboard.probe import ShellProbe
from agent_dashboard.scanner.beads import BeadsAdapter
from agent_dashboard.scanner.git import build_github_links, collect_git_info
from agent_dashboard.scanner.ports import ProcessInfo, correlate_servers, inspect_process
from agent_dashboard.scanner.pulls import fetch_pull_request
from agent_dashboard.scanner.tailscale import resolve_tailscale_hostname, tailscale_url
from agent_dashboard.scanner.workspaces import find_agent_directories

logger = logging.getLogger(__name__)

__all__ = [
    "AgentScanner",
    "correlate_servers",
    "find_agent_directories",
    "scan",
]


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _local_hostname() -> str:
    try:
        return socket.gethostname() or "localhost"
    except OSError:
        return "localhost"


class AgentScanner:
    """Stateless scanner: every call to :meth:`scan` reads the live world."""

    def __init__(
        self,
        config: DashboardConfig | None = None,
        probe: ShellProbe | None = None,
        inspect: Callable[[int], ProcessInfo | None] = inspect_process,
    ) -> None:
        self.config = config or DashboardConfig.from_env()
        self.probe = probe or ShellProbe(timeout=self.config.probe_timeout)
        self.inspect = inspect
        self.beads = BeadsAdapter(self.probe)

    @property
    def root(self) -> Path:
        return Path(self.config.gits_dir).absolute()

    def scan(self) -> ScanSnapshot:
        """Scan every agent workspace sequentially and assemble a snapshot."""
        agent_dirs = find_agent_directories(self.root)
        servers_by_dir = correlate_servers(self.root, self.probe, inspect=self.inspect)
        ts_hostname = resolve_tailscale_hostname(self.probe)

        agents = tuple(
            self._build_agent(d, servers_by_dir.get(d, []), ts_hostname) for d in agent_dirs
        )
        active = sum(1 for a in agents if a.status == "active")
        logger.info("Scan complete — %d agent(s), %d active", len(agents), active)

        return ScanSnapshot(
            agents=agents,
            scanned_at=_utc_timestamp(),
            hostname=_local_hostname(),
            tailscale_hostname=ts_hostname,
        )

    def _build_agent(
        self,
        directory: Path,
        servers: list[ServerRecord],
        ts_hostname: str | None,
    ) -> AgentRecord:
        git = collect_git_info(directory, self.probe)
        if ts_hostname:
            servers = [
                replace(s, tailscale_url=tailscale_url(ts_hostname, s.port)) for s in servers
            ]
        return AgentRecord(
            id=directory.name,
            directory=str(directory),
            repo=git.repo,
            branch=git.branch,
            servers=tuple(servers),
            pull_request=fetch_pull_request(directory, self.probe),
            beads=self.beads.status(directory),
            last_commit=git.last_commit,
            last_commit_hash=git.last_commit_hash,
            last_commit_time=git.last_commit_time,
            github=build_github_links(git),
        )


def scan(config: DashboardConfig | None = None) -> ScanSnapshot:
    """Run a single scan with *config* (default: from the environment)."""
    return AgentScanner(config).scan()
