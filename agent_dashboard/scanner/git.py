"""Git metadata for one agent workspace."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from agent_dashboard.models import GitHubLinks
from agent_dashboard.probe import ShellProbe

# https://github.com/owner/name(.git) or git@github.com:owner/name(.git)
_GITHUB_REMOTE_RE = re.compile(r"github\.com[/:]([^/]+/[^/]+?)(?:\.git)?$")

DEFAULT_BRANCH_FALLBACK = "main"
_ORIGIN_HEAD_PREFIX = "refs/remotes/origin/"


@dataclass(frozen=True)
class GitInfo:
    branch: str
    remote_url: str
    repo: str
    last_commit: str
    last_commit_hash: str
    last_commit_time: str
    default_branch: str

    @property
    def on_github(self) -> bool:
        return bool(_GITHUB_REMOTE_RE.search(self.remote_url))


def parse_repo(remote_url: str) -> str:
    """Reduce a GitHub remote to ``owner/name``; pass other remotes through."""
    match = _GITHUB_REMOTE_RE.search(remote_url)
    if match:
        return match.group(1)
    return remote_url


def collect_git_info(directory: Path, probe: ShellProbe) -> GitInfo:
    """Query branch, origin remote, last commit and default branch.

    Each query is independent; a failed one leaves its field at the
    default instead of failing the workspace.
    """
    branch = probe.run(["git", "branch", "--show-current"], cwd=directory) or "unknown"
    remote_url = probe.run(["git", "remote", "get-url", "origin"], cwd=directory)

    last_commit = probe.run(["git", "log", "-1", "--format=%s"], cwd=directory)
    last_commit_hash = probe.run(["git", "log", "-1", "--format=%H"], cwd=directory)
    last_commit_time = probe.run(["git", "log", "-1", "--format=%cr"], cwd=directory)

    origin_head = probe.run(
        ["git", "symbolic-ref", "refs/remotes/origin/HEAD"], cwd=directory
    )
    if origin_head.startswith(_ORIGIN_HEAD_PREFIX):
        default_branch = origin_head[len(_ORIGIN_HEAD_PREFIX):] or DEFAULT_BRANCH_FALLBACK
    else:
        default_branch = DEFAULT_BRANCH_FALLBACK

    return GitInfo(
        branch=branch,
        remote_url=remote_url,
        repo=parse_repo(remote_url),
        last_commit=last_commit,
        last_commit_hash=last_commit_hash,
        last_commit_time=last_commit_time,
        default_branch=default_branch,
    )


def build_github_links(info: GitInfo) -> GitHubLinks | None:
    """Convenience links for GitHub-hosted workspaces, else ``None``."""
    if not info.on_github:
        return None

    base = f"https://github.com/{info.repo}"
    branch = info.branch
    commits_url = f"{base}/commits/{branch}"
    return GitHubLinks(
        repo_url=base,
        branch_url=f"{base}/tree/{branch}",
        diff_url=f"{base}/compare/{info.default_branch}...{branch}",
        commits_url=commits_url,
        last_commit_url=(
            f"{base}/commit/{info.last_commit_hash}" if info.last_commit_hash else commits_url
        ),
    )
