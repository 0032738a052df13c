"""Pull request lookup through the GitHub CLI."""

from __future__ import annotations

from pathlib import Path

from agent_dashboard.models import PullRequestRecord
from agent_dashboard.probe import ShellProbe

GH_PR_VIEW_CMD = ["gh", "pr", "view", "--json", "number,url,title,state"]


def fetch_pull_request(directory: Path, probe: ShellProbe) -> PullRequestRecord | None:
    """Return the PR for the checked-out branch, if ``gh`` reports one."""
    data = probe.run_json(GH_PR_VIEW_CMD, cwd=directory)
    if not isinstance(data, dict):
        return None
    try:
        return PullRequestRecord(
            number=int(data["number"]),
            url=str(data["url"]),
            title=str(data.get("title", "")),
            state=str(data.get("state", "")),
        )
    except (KeyError, TypeError, ValueError):
        return None
