from __future__ import annotations

import logging
import socket
import threading

from tcp_echo.common import ServerBindError
from tcp_echo.config import EchoConfig
from tcp_echo.handler import handle_connection
from tcp_echo.netinfo import startup_banner

logger = logging.getLogger(__name__)

WILDCARD_HOST = "0.0.0.0"


def open_listener(host: str, port: str | int, backlog: int = 128) -> socket.socket:
    """Bind and listen on host:port, raising ServerBindError on any failure.

    The IPv4 wildcard host is served on a dual-stack socket where the platform
    supports one, so clients can reach it over IPv4 and IPv6.
    """
    address = f"{host}:{port}"
    try:
        port_number = int(port)
        if host in ("", WILDCARD_HOST) and socket.has_dualstack_ipv6():
            return socket.create_server(
                ("::", port_number),
                family=socket.AF_INET6,
                backlog=backlog,
                dualstack_ipv6=True,
            )
        family = socket.getaddrinfo(host, port_number, type=socket.SOCK_STREAM)[0][0]
        return socket.create_server((host, port_number), family=family, backlog=backlog)
    except (OSError, ValueError, OverflowError) as exc:
        raise ServerBindError(address, exc) from exc


def serve_forever(server: socket.socket, config: EchoConfig) -> None:
    """Accept connections and hand each one to its own handler thread.

    Accept errors are logged and the loop keeps going. Returns only once the
    listening socket has been closed.
    """
    while True:
        try:
            conn, addr = server.accept()
        except OSError as exc:
            if server.fileno() == -1:
                return
            logger.warning("Error accepting connection: %s", exc)
            continue
        threading.Thread(
            target=handle_connection,
            args=(conn, config),
            name=f"echo-{addr[0]}:{addr[1]}",
            daemon=True,
        ).start()


def run_echo_server(config: EchoConfig) -> None:
    server = open_listener(config.host, config.port)
    with server:
        print(startup_banner(config), flush=True)
        logger.info("TCP Echo Server is running on %s", config.address)
        logger.info("Using prefix: '%s'", config.prefix)
        logger.info("Ready to accept connections...")
        serve_forever(server, config)
