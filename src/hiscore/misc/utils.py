from time import time

from rich.console import Console

# Handles
cout = Console()
cerr = Console(stderr=True)

_PORT_MIN = 0  # 0 asks the OS for any free port
_PORT_MAX = 65535


def unix_now() -> int:
    """Return whole seconds since the Epoch."""
    return int(time())


def parse_listen_addr(addr: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address.

    An empty host (e.g. ``:8080``) means all interfaces. IPv6 hosts may be
    bracketed (``[::1]:8080``).

    Raises:
        ValueError: if the port is missing, not an integer or out of range
    """
    host, sep, port_raw = addr.strip().rpartition(":")
    if not sep:
        msg = f"missing port in address: {addr}"
        raise ValueError(msg)

    try:
        port = int(port_raw)
    except ValueError as e:
        msg = f"port is not an integer: {port_raw}"
        raise ValueError(msg) from e

    if not (_PORT_MIN <= port <= _PORT_MAX):
        msg = f"port is out of range: {port}"
        raise ValueError(msg)

    return host.removeprefix("[").removesuffix("]"), port
