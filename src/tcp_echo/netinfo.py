from __future__ import annotations

import ipaddress
import logging
import socket
from datetime import datetime

import psutil

from tcp_echo.config import EchoConfig

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_TOP = "╔══════════════════════════════════════╗"
_TITLE = "║        TCP Echo Server Started        ║"
_RULE = "╠══════════════════════════════════════╣"
_BOTTOM = "╚══════════════════════════════════════╝"


def get_hostname() -> str:
    try:
        return socket.gethostname() or "unknown"
    except Exception:
        return "unknown"


def discover_ipv4_addresses() -> list[str]:
    """Non-loopback IPv4 addresses of the local interfaces, in discovery order."""
    try:
        interfaces = psutil.net_if_addrs()
    except Exception as exc:
        logger.debug("Interface enumeration failed: %s", exc)
        return []

    ips: list[str] = []
    for addrs in interfaces.values():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            try:
                if ipaddress.ip_address(addr.address).is_loopback:
                    continue
            except ValueError:
                continue
            ips.append(addr.address)
    return ips


def _row(label: str, value: object) -> str:
    return f"║ {label:<20}: {str(value):<15} ║"


def _continuation(value: object) -> str:
    return f"║ {'':<20}  {str(value):<15} ║"


def _render_box(hostname: str, host: str, port: object, ips: list[str], extra: list[tuple[str, object]]) -> list[str]:
    lines = [_TOP, _TITLE, _RULE]
    lines.append(_row("Hostname", hostname))
    lines.append(_row("Listening on", host))
    lines.append(_row("Port", port))
    if ips:
        lines.append(_row("Available IPs", ips[0]))
        lines.extend(_continuation(ip) for ip in ips[1:])
    lines.extend(_row(label, value) for label, value in extra)
    lines.append(_BOTTOM)
    return lines


def describe(bound_address: tuple) -> str:
    """Boxed host report for a connection's local endpoint.

    Lookup failures are replaced with placeholders; this never raises.
    """
    try:
        host, port = bound_address[0], bound_address[1]
    except (TypeError, IndexError):
        host, port = "unknown", "unknown"
    now = datetime.now().strftime(TIME_FORMAT)
    lines = _render_box(get_hostname(), host, port, discover_ipv4_addresses(), [("Current Time", now)])
    return "\n" + "\n".join(lines) + "\n\n"


def startup_banner(config: EchoConfig) -> str:
    now = datetime.now().strftime(TIME_FORMAT)
    lines = _render_box(
        get_hostname(),
        config.host,
        config.port,
        discover_ipv4_addresses(),
        [("Start Time", now), ("Prefix", config.prefix)],
    )
    return "\n" + "\n".join(lines) + "\n"
