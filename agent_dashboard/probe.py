"""Best-effort external command execution.

Every data source the dashboard reads (lsof, git, gh, bd, tailscale) goes
through :class:`ShellProbe`.  A probe never raises: a missing binary, a
non-zero exit or a timeout all come back as an empty string, so callers
treat "tool failed" and "tool absent" the same way.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Sequence

logger = logging.getLogger(__name__)


class ShellProbe:
    """Run short-lived commands with a hard wall-clock limit."""

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout

    def run(self, cmd: Sequence[str], cwd: str | Path | None = None) -> str:
        """Return stripped stdout of *cmd*, or ``""`` on any failure."""
        try:
            result = subprocess.run(
                list(cmd),
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.debug("Probe timed out after %.1fs: %s", self.timeout, " ".join(cmd))
            return ""
        except (OSError, ValueError) as exc:
            logger.debug("Probe failed to start %s: %s", " ".join(cmd), exc)
            return ""
        if result.returncode != 0:
            logger.debug("Probe exited %d: %s", result.returncode, " ".join(cmd))
            return ""
        return result.stdout.strip()

    def run_json(self, cmd: Sequence[str], cwd: str | Path | None = None) -> Any | None:
        """Run *cmd* and decode its stdout as JSON.

        Absent output and malformed output both collapse to ``None``.
        """
        out = self.run(cmd, cwd=cwd)
        if not out:
            return None
        try:
            return json.loads(out)
        except json.JSONDecodeError:
            logger.debug("Probe returned non-JSON output: %s", " ".join(cmd))
            return None
