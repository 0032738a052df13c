"""pytest configuration for Agent Dashboard tests."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from agent_dashboard.config import DashboardConfig
from agent_dashboard.probe import ShellProbe
from agent_dashboard.scanner.ports import ProcessInfo


# Configure asyncio mode for pytest-asyncio
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


class FakeProbe(ShellProbe):
    """Test double that answers commands from a lookup table.

    Keys are the space-joined command, optionally prefixed with the
    working directory's name (``"proj-1:git branch --show-current"``) for
    per-workspace answers.  Unknown commands return ``""`` like a missing
    tool would.
    """

    def __init__(self, responses: dict[str, str] | None = None) -> None:
        super().__init__(timeout=1.0)
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, str | None]] = []

    def run(self, cmd: Sequence[str], cwd: str | Path | None = None) -> str:
        key = " ".join(cmd)
        where = Path(cwd).name if cwd is not None else None
        self.calls.append((key, where))
        if where is not None and f"{where}:{key}" in self.responses:
            return self.responses[f"{where}:{key}"]
        return self.responses.get(key, "")


def make_workspace(root: Path, name: str, *, git: bool = True, beads: bool = False) -> Path:
    path = root / name
    path.mkdir(parents=True)
    if git:
        (path / ".git").mkdir()
    if beads:
        (path / ".beads").mkdir()
    return path


def lsof_line(command: str, pid: int, port: int, host: str = "*") -> str:
    return (
        f"{command:<9} {pid:>6} dev   23u  IPv4 0x1234      0t0  TCP "
        f"{host}:{port} (LISTEN)"
    )


LSOF_HEADER = "COMMAND     PID USER   FD   TYPE DEVICE SIZE/OFF NODE NAME"


@pytest.fixture()
def gits_dir(tmp_path):
    root = tmp_path / "gits"
    root.mkdir()
    return root


@pytest.fixture()
def config(gits_dir):
    return DashboardConfig(gits_dir=gits_dir, refresh_seconds=60.0, live_reload=False)


@pytest.fixture()
def fake_probe():
    return FakeProbe()


@pytest.fixture()
def process_table():
    """Mutable ``{pid: ProcessInfo}`` used as a fake ``inspect_process``."""
    table: dict[int, ProcessInfo] = {}
    return table


def inspector(table: dict[int, ProcessInfo]):
    return lambda pid: table.get(pid)
