from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

HOST_ENV = "ECHO_SERVER_HOST"
PORT_ENV = "ECHO_SERVER_PORT"
PREFIX_ENV = "ECHO_SERVER_PREFIX"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = "9002"
DEFAULT_PREFIX = "ECHO: "


@dataclass(frozen=True)
class EchoConfig:
    host: str = DEFAULT_HOST
    port: str = DEFAULT_PORT
    prefix: str = DEFAULT_PREFIX

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


def load_config(environ: Mapping[str, str] | None = None) -> EchoConfig:
    """Build the server configuration from the environment.

    Unset and empty variables both fall back to the defaults.
    """
    env = os.environ if environ is None else environ
    return EchoConfig(
        host=env.get(HOST_ENV) or DEFAULT_HOST,
        port=env.get(PORT_ENV) or DEFAULT_PORT,
        prefix=env.get(PREFIX_ENV) or DEFAULT_PREFIX,
    )
