"""Agent workspace discovery under the watched root."""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

# Agent checkouts are named like ``project-1``, ``swing-3``.
AGENT_NAME_RE = re.compile(r"-\d+$")


def is_agent_name(name: str) -> bool:
    return bool(AGENT_NAME_RE.search(name))


def find_agent_directories(root: Path) -> list[Path]:
    """Return agent workspaces directly under *root*, sorted by name.

    A workspace is a subdirectory whose name ends in ``-<n>`` and which
    holds a ``.git`` entry (a directory, or a file for linked worktrees).
    A missing root yields an empty list; an unreadable one raises
    :class:`OSError`.
    """
    root = Path(root).absolute()
    if not root.is_dir():
        logger.debug("Watched root %s does not exist", root)
        return []

    found: set[Path] = set()
    for entry in root.iterdir():
        if not entry.is_dir() or not is_agent_name(entry.name):
            continue
        if (entry / ".git").exists():
            found.add(entry)
    return sorted(found, key=lambda p: p.name)
