from __future__ import annotations

import ipaddress
import logging
import socket

from tcp_echo.config import EchoConfig
from tcp_echo.netinfo import describe

logger = logging.getLogger(__name__)

WELCOME = (
    "\n=== Welcome to TCP Echo Server! ===\n"
    "Type anything and it will be echoed back.\n"
    "Type 'quit' to exit.\n"
    "================================\n\n"
)
PROMPT = "\n> "
GOODBYE = b"Goodbye!\n"
QUIT_COMMAND = b"quit"


def _unmap(addr: object) -> object:
    """Show IPv4 clients of a dual-stack listener by their IPv4 address."""
    if isinstance(addr, tuple) and len(addr) >= 2 and isinstance(addr[0], str):
        try:
            mapped = ipaddress.ip_address(addr[0].split("%", 1)[0])
        except ValueError:
            return addr
        if isinstance(mapped, ipaddress.IPv6Address) and mapped.ipv4_mapped is not None:
            return (str(mapped.ipv4_mapped), addr[1])
    return addr


def _endpoint(addr: object) -> str:
    if isinstance(addr, tuple) and len(addr) >= 2:
        return f"{addr[0]}:{addr[1]}"
    return str(addr) or "unknown"


def _strip_line_ending(line: bytes) -> bytes:
    if line.endswith(b"\n"):
        line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
    return line


def handle_connection(conn: socket.socket, config: EchoConfig) -> None:
    """Serve one client: welcome banner, then echo lines until quit or EOF.

    The connection is closed on every exit path. I/O errors end this
    connection only and are logged, never raised.
    """
    with conn:
        try:
            client_addr = _endpoint(_unmap(conn.getpeername()))
        except OSError:
            client_addr = "unknown"
        try:
            local = _unmap(conn.getsockname())
        except OSError:
            local = ("unknown", "unknown")

        logger.info("New connection from %s to %s", client_addr, _endpoint(local))
        try:
            _serve(conn, config, client_addr, local)
        finally:
            logger.info("Client disconnected: %s", client_addr)


def _serve(conn: socket.socket, config: EchoConfig, client_addr: str, local: tuple) -> None:
    logger.debug("Sending welcome message to %s", client_addr)
    try:
        conn.sendall((WELCOME + describe(local) + PROMPT).encode("utf-8"))
    except OSError as exc:
        logger.warning("Error writing to %s: %s", client_addr, exc)
        return
    logger.debug("Welcome message sent to %s", client_addr)

    prefix = config.prefix.encode("utf-8")
    prompt = PROMPT.encode("utf-8")
    with conn.makefile("rb") as reader:
        try:
            for raw in iter(reader.readline, b""):
                line = _strip_line_ending(raw)
                if line.lower() == QUIT_COMMAND:
                    try:
                        conn.sendall(GOODBYE)
                    except OSError as exc:
                        logger.warning("Error writing to %s: %s", client_addr, exc)
                    return
                try:
                    conn.sendall(b"\n" + prefix + line + prompt)
                except OSError as exc:
                    logger.warning("Error writing to %s: %s", client_addr, exc)
                    return
        except OSError as exc:
            logger.warning("Error reading from %s: %s", client_addr, exc)
