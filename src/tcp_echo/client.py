from __future__ import annotations

import socket

from tcp_echo.common import TcpTarget
from tcp_echo.handler import PROMPT

_PROMPT = PROMPT.encode("utf-8")


class EchoClient:
    """Blocking line client for the echo server."""

    def __init__(self, target: TcpTarget, timeout: float = 5.0) -> None:
        self.target = target
        self.timeout = timeout
        self._sock: socket.socket | None = None
        self._buffer = b""

    def __enter__(self) -> EchoClient:
        self._sock = socket.create_connection((self.target.host, self.target.port), timeout=self.timeout)
        return self

    def __exit__(self, *exc_info) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def _connected(self) -> socket.socket:
        if self._sock is None:
            raise RuntimeError("client is not connected")
        return self._sock

    def _recv_until_prompt(self) -> bytes:
        sock = self._connected()
        while _PROMPT not in self._buffer:
            data = sock.recv(4096)
            if not data:
                raise ConnectionError("server closed the connection")
            self._buffer += data
        head, _, self._buffer = self._buffer.partition(_PROMPT)
        return head

    def read_welcome(self) -> str:
        return self._recv_until_prompt().decode("utf-8", errors="replace")

    def send_line(self, text: str) -> str:
        """Send one line and return the echo, without the framing newline and prompt."""
        self._connected().sendall(text.encode("utf-8") + b"\n")
        return self._recv_until_prompt().decode("utf-8", errors="replace").removeprefix("\n")

    def quit(self) -> str:
        sock = self._connected()
        sock.sendall(b"quit\n")
        chunks = [self._buffer]
        self._buffer = b""
        while True:
            data = sock.recv(4096)
            if not data:
                break
            chunks.append(data)
        return b"".join(chunks).decode("utf-8", errors="replace")


def run_echo_client(target: TcpTarget, messages: list[str]) -> list[str]:
    """Connect, echo each message, then quit. Returns the echoes followed by the farewell."""
    with EchoClient(target) as client:
        client.read_welcome()
        replies = [client.send_line(message) for message in messages]
        replies.append(client.quit())
    return replies
