"""Map listening TCP ports to the agent workspace that owns them.

One ``lsof`` call lists every listener on the host; each owning pid is
then resolved to its working directory and command line via psutil.  A
listener belongs to an agent when the process cwd lies inside
``<root>/<name>-<n>/``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, NamedTuple

import psutil

from agent_dashboard.models import ServerRecord
from agent_dashboard.probe import ShellProbe
from agent_dashboard.scanner.workspaces import is_agent_name

logger = logging.getLogger(__name__)

LSOF_LISTEN_CMD = ["lsof", "-nP", "-iTCP", "-sTCP:LISTEN"]

_PORT_RE = re.compile(r":(\d+)$")

# Checked in order; the first substring found in the command line wins.
SERVER_SIGNATURES: list[tuple[str, str]] = [
    ("vite", "vite"),
    ("playwright", "playwright"),
    ("next", "next"),
    ("jekyll", "jekyll"),
]


class ProcessInfo(NamedTuple):
    cwd: str
    cmdline: str


def inspect_process(pid: int) -> ProcessInfo | None:
    """Return cwd and command line for *pid*, or ``None`` if it is gone."""
    try:
        proc = psutil.Process(pid)
        cwd = proc.cwd()
        cmdline = " ".join(proc.cmdline())
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        return None
    return ProcessInfo(cwd=cwd, cmdline=cmdline)


def parse_listeners(output: str) -> dict[int, int]:
    """Parse ``lsof`` listener output into ``{port: pid}``.

    Columns: COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME.  When a
    port shows up more than once the last row wins.
    """
    port_to_pid: dict[int, int] = {}
    for line in output.splitlines():
        if "LISTEN" not in line:
            continue
        parts = line.split()
        if len(parts) < 9:
            continue
        try:
            pid = int(parts[1])
        except ValueError:
            continue
        match = _PORT_RE.search(parts[8])
        if match:
            port_to_pid[int(match.group(1))] = pid
    return port_to_pid


def classify_server(cmdline: str) -> str:
    for server_type, needle in SERVER_SIGNATURES:
        if needle in cmdline:
            return server_type
    return "unknown"


def agent_directory_for(cwd: str, root: Path) -> Path | None:
    """Return ``<root>/<agent>`` if *cwd* is inside an agent workspace.

    psutil reports symlink-resolved paths, so *cwd* is matched against
    both *root* as given and its resolved form.  The returned key is
    always under *root* as given, matching what discovery produces.
    """
    relative = None
    for candidate in (root, root.resolve()):
        try:
            relative = Path(cwd).relative_to(candidate)
        except ValueError:
            continue
        break
    if relative is None or not relative.parts:
        return None
    agent_name = relative.parts[0]
    if not is_agent_name(agent_name):
        return None
    return root / agent_name


def correlate_servers(
    root: Path,
    probe: ShellProbe,
    inspect: Callable[[int], ProcessInfo | None] = inspect_process,
) -> dict[Path, list[ServerRecord]]:
    """Group every listening port on the host by owning agent directory."""
    root = Path(root).absolute()
    port_to_pid = parse_listeners(probe.run(LSOF_LISTEN_CMD))
    if not port_to_pid:
        return {}

    process_cache: dict[int, ProcessInfo | None] = {}
    servers_by_dir: dict[Path, list[ServerRecord]] = {}

    for port, pid in sorted(port_to_pid.items()):
        if pid not in process_cache:
            process_cache[pid] = inspect(pid)
        info = process_cache[pid]
        if info is None:
            continue

        agent_dir = agent_directory_for(info.cwd, root)
        if agent_dir is None:
            continue

        server = ServerRecord(
            type=classify_server(info.cmdline),
            port=port,
            pid=pid,
            url=f"http://localhost:{port}",
        )
        servers_by_dir.setdefault(agent_dir, []).append(server)

    logger.debug(
        "Correlated %d listener(s) to %d agent(s)",
        sum(len(v) for v in servers_by_dir.values()),
        len(servers_by_dir),
    )
    return servers_by_dir
