"""
High score server entry point.

Startup order:
    1. Parse CLI flags (environment / .env provide the defaults)
    2. Generate the process HMAC key
    3. Bind the listening socket, so the real port is known before serving
    4. Run the FastAPI app under uvicorn on that socket

Failing any of 2-3 is fatal: there is nothing useful to serve without them.
"""

import contextlib
import logging
import socket
import sys

import uvicorn

from .app import create_app
from .misc import get_cli_args, init_logging
from .store import ScoreStore
from .tokens import TokenCodec


def _bind(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    return socket.create_server((host, port), family=family)


def main() -> None:
    args = get_cli_args()
    init_logging(args.log_level)
    log = logging.getLogger("hiscore")

    try:
        codec = TokenCodec.generate()
    except (OSError, NotImplementedError) as e:
        log.critical("Cannot generate HMAC key: %s", e)
        sys.exit(1)

    try:
        sock = _bind(args.host, args.port)
    except OSError as e:
        log.critical("Cannot listen on %s:%d: %s", args.host, args.port, e)
        sys.exit(1)

    app = create_app(store=ScoreStore(), codec=codec, admin_password=args.admin_password)

    host, port = sock.getsockname()[:2]
    log.info("Serving on http://%s/", f"[{host}]:{port}" if ":" in host else f"{host}:{port}")
    log.info('Admin password is "%s"', args.admin_password)

    config = uvicorn.Config(app, log_config=None, log_level=args.log_level)
    with contextlib.suppress(KeyboardInterrupt):
        uvicorn.Server(config).run(sockets=[sock])


if __name__ == "__main__":
    main()
