from __future__ import annotations

import argparse
import logging
import sys

from tcp_echo.client import run_echo_client
from tcp_echo.common import ServerBindError, TcpTarget, configure_logging
from tcp_echo.config import load_config
from tcp_echo.server import run_echo_server

logger = logging.getLogger("tcp_echo.cli")


def _add_serve(sub: argparse._SubParsersAction) -> None:
    sub.add_parser(
        "serve",
        help="Run the echo server (configured by ECHO_SERVER_HOST, ECHO_SERVER_PORT, ECHO_SERVER_PREFIX)",
    )


def _add_client(sub: argparse._SubParsersAction) -> None:
    cli = sub.add_parser("client", help="Send lines to a running echo server and print the echoes")
    cli.add_argument("--host", default="127.0.0.1")
    cli.add_argument("--port", type=int, default=9002)
    cli.add_argument(
        "--message",
        action="append",
        default=None,
        help="Line to send; repeat for several lines (default: hello)",
    )


def _serve() -> int:
    config = load_config()
    try:
        run_echo_server(config)
    except ServerBindError as exc:
        logger.critical("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tcp-echo",
        description=(
            "Line-oriented TCP echo server. Every received line is sent back with a configurable "
            "prefix until the client disconnects or types 'quit'."
        ),
    )
    sub = parser.add_subparsers(dest="cmd")
    _add_serve(sub)
    _add_client(sub)

    args = parser.parse_args(argv)
    configure_logging()

    if args.cmd in (None, "serve"):
        return _serve()

    if args.cmd == "client":
        replies = run_echo_client(TcpTarget(args.host, args.port), args.message or ["hello"])
        for reply in replies:
            print(reply)
        return 0

    print(f"Unknown command: {args.cmd}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
