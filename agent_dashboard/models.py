"""Snapshot data model.

All records are frozen: a snapshot is built once per scan and replaced
wholesale on the next one.  ``to_dict`` produces the JSON shape served at
``/api/agents``; optional fields are left out when absent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ServerRecord:
    type: str
    port: int
    pid: int
    url: str
    tailscale_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "port": self.port,
            "pid": self.pid,
            "url": self.url,
        }
        if self.tailscale_url:
            data["tailscaleUrl"] = self.tailscale_url
        return data


@dataclass(frozen=True)
class PullRequestRecord:
    number: int
    url: str
    title: str
    state: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "url": self.url,
            "title": self.title,
            "state": self.state,
        }


@dataclass(frozen=True)
class IssueTrackerStatus:
    """Beads issue counts for one workspace."""

    open: int = 0
    in_progress: int = 0
    closed: int = 0
    in_progress_issues: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "open": self.open,
            "inProgress": self.in_progress,
            "closed": self.closed,
            "inProgressIssues": list(self.in_progress_issues),
        }


@dataclass(frozen=True)
class GitHubLinks:
    repo_url: str
    branch_url: str
    diff_url: str
    commits_url: str
    last_commit_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "repoUrl": self.repo_url,
            "branchUrl": self.branch_url,
            "diffUrl": self.diff_url,
            "commitsUrl": self.commits_url,
            "lastCommitUrl": self.last_commit_url,
        }


@dataclass(frozen=True)
class AgentRecord:
    id: str
    directory: str
    repo: str
    branch: str
    servers: tuple[ServerRecord, ...] = ()
    pull_request: PullRequestRecord | None = None
    beads: IssueTrackerStatus | None = None
    last_commit: str = ""
    last_commit_hash: str = ""
    last_commit_time: str = ""
    github: GitHubLinks | None = None

    @property
    def status(self) -> str:
        """``active`` while at least one server is listening, else ``idle``."""
        return "active" if self.servers else "idle"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "directory": self.directory,
            "repo": self.repo,
            "branch": self.branch,
        }
        if self.pull_request is not None:
            data["pr"] = self.pull_request.to_dict()
        data["servers"] = [s.to_dict() for s in self.servers]
        if self.beads is not None:
            data["beads"] = self.beads.to_dict()
        data["lastCommit"] = self.last_commit
        data["lastCommitHash"] = self.last_commit_hash
        data["lastCommitTime"] = self.last_commit_time
        if self.github is not None:
            data["github"] = self.github.to_dict()
        data["status"] = self.status
        return data


@dataclass(frozen=True)
class ScanSnapshot:
    agents: tuple[AgentRecord, ...]
    scanned_at: str
    hostname: str
    tailscale_hostname: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "agents": [a.to_dict() for a in self.agents],
            "scannedAt": self.scanned_at,
            "hostname": self.hostname,
        }
        if self.tailscale_hostname:
            data["tailscaleHostname"] = self.tailscale_hostname
        return data
