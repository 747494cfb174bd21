"""Entry point: ``python -m access_counter``.

Binds the HTTP listener and serves the app with uvicorn. A failed bind is the
only fatal startup error; everything else degrades and keeps serving.
"""
from __future__ import annotations

import sys
import socket
import logging

import uvicorn

from access_counter.api.main import create_app
from access_counter.config import Settings, configure_logging

logger = logging.getLogger(__name__)


class ListenerBindError(OSError):
    """The HTTP listener could not bind its address."""


def bind_listener(host: str, port: int) -> socket.socket:
    """Bind and return a listening TCP socket, or raise ListenerBindError."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(socket.SOMAXCONN)
    except OSError as e:
        sock.close()
        raise ListenerBindError(f"cannot bind {host}:{port}: {e}") from e
    sock.set_inheritable(True)
    return sock


def main() -> int:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        sock = bind_listener(settings.host, settings.port)
    except ListenerBindError as e:
        logger.critical(f"Server failed to start: {e}")
        return 1

    app = create_app(settings=settings)
    config = uvicorn.Config(app, log_level=settings.log_level.lower(), log_config=None)
    server = uvicorn.Server(config)
    logger.info(f"Server starting on {settings.host}:{settings.port}")
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
