"""Tailscale identity of this host, used to build tailnet-reachable URLs."""

from __future__ import annotations

from agent_dashboard.probe import ShellProbe

TAILSCALE_STATUS_CMD = ["tailscale", "status", "--json"]


def resolve_tailscale_hostname(probe: ShellProbe) -> str | None:
    """Return this node's MagicDNS name without the trailing dot."""
    status = probe.run_json(TAILSCALE_STATUS_CMD)
    if not isinstance(status, dict):
        return None
    own = status.get("Self")
    if not isinstance(own, dict):
        return None
    dns_name = own.get("DNSName")
    if not isinstance(dns_name, str):
        return None
    return dns_name.rstrip(".") or None


def tailscale_url(hostname: str, port: int) -> str:
    return f"http://{hostname}:{port}"
