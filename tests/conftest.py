import logging
import socket
import threading

import pytest

from tcp_echo.common import TcpTarget
from tcp_echo.config import EchoConfig
from tcp_echo.server import open_listener, serve_forever


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def recv_until(sock: socket.socket, marker: bytes) -> bytes:
    data = b""
    while not data.endswith(marker):
        chunk = sock.recv(4096)
        if not chunk:
            break
        data += chunk
    return data


def recv_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def start_server():
    """Start an in-process server on an ephemeral loopback port."""
    listeners = []

    def _start(prefix: str = "ECHO: ") -> TcpTarget:
        listener = open_listener("127.0.0.1", 0)
        listeners.append(listener)
        port = listener.getsockname()[1]
        config = EchoConfig(host="127.0.0.1", port=str(port), prefix=prefix)
        threading.Thread(target=serve_forever, args=(listener, config), daemon=True).start()
        return TcpTarget("127.0.0.1", port)

    yield _start
    for listener in listeners:
        listener.close()


@pytest.fixture
def connect():
    socks = []

    def _connect(target: TcpTarget) -> socket.socket:
        sock = socket.create_connection((target.host, target.port), timeout=5)
        socks.append(sock)
        recv_until(sock, b"\n> ")
        return sock

    yield _connect
    for sock in socks:
        sock.close()


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("tcp_echo")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
