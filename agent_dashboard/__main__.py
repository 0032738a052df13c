"""Agent Dashboard entry point.

Usage::

    python -m agent_dashboard [serve] [--port=9999]
    python -m agent_dashboard scan
    python -m agent_dashboard help
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

USAGE = """\
Agent Dashboard - Central portal for multi-agent dev sessions

Usage:
  agent-dashboard [command] [options]

Commands:
  serve [--port=9999]  Start the dashboard server (default)
  scan                 One-shot scan, output JSON to stdout
  help                 Show this help message

Environment:
  GITS_DIR             Directory to scan for agents (default: ~/gits)

Examples:
  agent-dashboard                    # Start server on port 9999
  agent-dashboard serve --port=8080  # Start server on port 8080
  agent-dashboard scan               # Scan and print JSON
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-dashboard",
        description="Central portal for multi-agent dev sessions",
        add_help=False,
    )
    parser.add_argument("command", nargs="?", default="serve")
    parser.add_argument("--port", type=int, default=None, help="HTTP port (default: 9999)")
    parser.add_argument("--host", default=None, help="Bind address (default: 0.0.0.0)")
    parser.add_argument("-h", "--help", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    # Anything we don't understand (bad flag, bad value, stray argument)
    # shows the usage text and exits 0.
    try:
        args, extra = _build_parser().parse_known_args(argv)
    except SystemExit:
        print(USAGE)
        return 0
    if args.help or extra or args.command not in ("serve", "scan"):
        print(USAGE)
        return 0

    from agent_dashboard.config import DashboardConfig

    config = DashboardConfig.from_env()
    if args.port is not None:
        config.port = args.port
    if args.host is not None:
        config.host = args.host

    if args.command == "scan":
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
        from agent_dashboard.scanner import scan

        snapshot = scan(config)
        print(json.dumps(snapshot.to_dict(), indent=2))
        return 0

    from agent_dashboard.server import serve

    try:
        serve(config)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
