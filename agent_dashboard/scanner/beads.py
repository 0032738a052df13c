"""Beads (``bd``) issue tracker adapter.

``bd`` only prints human-readable text, so the parsing lives here and
nowhere else.  Anything that fails to parse counts as zero.
"""

from __future__ import annotations

import re
from pathlib import Path

from agent_dashboard.models import IssueTrackerStatus
from agent_dashboard.probe import ShellProbe

BEADS_DIR = ".beads"

_OPEN_RE = re.compile(r"Open:\s+(\d+)")
_IN_PROGRESS_RE = re.compile(r"In Progress:\s+(\d+)")
_CLOSED_RE = re.compile(r"Closed:\s+(\d+)")
_ISSUE_ID_RE = re.compile(r"^([\w-]+)\s", re.MULTILINE)


def _count(pattern: re.Pattern[str], text: str) -> int:
    match = pattern.search(text)
    return int(match.group(1)) if match else 0


class BeadsAdapter:
    """Read issue counts and in-progress ids for a workspace."""

    STATS_CMD = ["bd", "stats"]
    IN_PROGRESS_CMD = ["bd", "list", "--status=in_progress"]

    def __init__(self, probe: ShellProbe) -> None:
        self.probe = probe

    def status(self, directory: Path) -> IssueTrackerStatus | None:
        if not (Path(directory) / BEADS_DIR).exists():
            return None

        stats = self.probe.run(self.STATS_CMD, cwd=directory)
        if not stats:
            return None

        listing = self.probe.run(self.IN_PROGRESS_CMD, cwd=directory)
        return self.parse(stats, listing)

    @staticmethod
    def parse(stats: str, listing: str = "") -> IssueTrackerStatus:
        """Build a status from raw ``bd stats`` and ``bd list`` output."""
        return IssueTrackerStatus(
            open=_count(_OPEN_RE, stats),
            in_progress=_count(_IN_PROGRESS_RE, stats),
            closed=_count(_CLOSED_RE, stats),
            in_progress_issues=tuple(_ISSUE_ID_RE.findall(listing)),
        )
