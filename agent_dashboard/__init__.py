"""Agent Dashboard — live status portal for multi-agent dev sessions.

Scans every agent workspace under the watched root (``$GITS_DIR``) and
reports git state, pull requests, beads issue counts and running dev
servers as one snapshot.

Quickstart::

    from agent_dashboard.scanner import scan

    snapshot = scan()
    for agent in snapshot.agents:
        print(agent.id, agent.branch, agent.status)
"""

__version__ = "1.0.0"
