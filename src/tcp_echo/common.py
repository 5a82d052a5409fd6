from __future__ import annotations

import logging
import os
from dataclasses import dataclass

LOG_LEVEL_ENV = "ECHO_SERVER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"


@dataclass(frozen=True)
class TcpTarget:
    host: str
    port: int


class ServerBindError(RuntimeError):
    """The listening socket could not be bound; the server cannot start."""

    def __init__(self, address: str, cause: Exception) -> None:
        super().__init__(f"Failed to start server on {address}: {cause}")
        self.address = address
        self.cause = cause


def configure_logging(level: str | None = None) -> logging.Logger:
    logger = logging.getLogger("tcp_echo")
    name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    resolved = logging.getLevelName(name)
    logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
