import os
import sys
from typing import Final, NamedTuple

from dotenv import load_dotenv

from hiscore import __prog__

from .logging_conf import LOG_ABBREV_2_LVL
from .utils import cerr, parse_listen_addr

DEFAULT_HOST: Final = ":0"
DEFAULT_ADMIN_PW: Final = "changeme"
DEFAULT_LOG_LEVEL: Final = "INF"


class _EnvConf(NamedTuple):
    host: str
    port: int
    admin_password: str
    log_level: str


def _validate_host(name: str) -> tuple[str, int]:
    val = os.getenv(name, DEFAULT_HOST)

    try:
        return parse_listen_addr(val)
    except ValueError as e:
        msg = f"[cyan]{name}[/] is invalid: {e}"
        raise ValueError(msg) from e


def _validate_admin_pw(name: str) -> str:
    val = os.getenv(name)
    if val is None:
        return DEFAULT_ADMIN_PW

    if not val.strip():
        msg = f"[cyan]{name}[/] is set but empty"
        raise ValueError(msg)

    return val


def _validate_log_level(name: str) -> str:
    val = os.getenv(name, DEFAULT_LOG_LEVEL).strip().upper()
    if val not in LOG_ABBREV_2_LVL:
        msg = f"[cyan]{name}[/] must be one of {', '.join(LOG_ABBREV_2_LVL)}: {val}"
        raise ValueError(msg)

    return val


def get_env_vars() -> _EnvConf:
    """Read server defaults from the environment (and ``.env``).

    Every variable is optional; CLI flags take precedence over them.
    Exits with an ``env-error`` listing every bad variable at once.
    """
    load_dotenv()

    errs: list[str] = []
    addr: tuple[str, int] | None = None
    admin_pw: str | None = None
    log_level: str | None = None

    try:
        addr = _validate_host("HISCORE_HOST")
    except ValueError as e:
        errs.append(str(e))

    try:
        admin_pw = _validate_admin_pw("HISCORE_ADMIN_PW")
    except ValueError as e:
        errs.append(str(e))

    try:
        log_level = _validate_log_level("HISCORE_LOG_LEVEL")
    except ValueError as e:
        errs.append(str(e))

    if addr is None or admin_pw is None or log_level is None:
        cerr.print("".join(f"[bold bright_red]{__prog__}: env-error:[/] {e}\n" for e in errs), end="")
        sys.exit(1)

    host, port = addr
    return _EnvConf(host=host, port=port, admin_password=admin_pw, log_level=log_level)
