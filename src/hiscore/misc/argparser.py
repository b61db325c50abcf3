from __future__ import annotations

from argparse import ArgumentParser, ArgumentTypeError
from typing import TYPE_CHECKING, NamedTuple, cast

from rich_argparse import RichHelpFormatter

from .env import get_env_vars
from .logging_conf import LOG_ABBREV_2_LVL, LOG_LVL_2_COLOR
from .utils import parse_listen_addr

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .env import _EnvConf
    from .logging_conf import LogLvl


def _listen_addr(val: str) -> tuple[str, int]:
    try:
        return parse_listen_addr(val)
    except ValueError as e:
        raise ArgumentTypeError(str(e)) from e


def _mk_parser(env: _EnvConf) -> ArgumentParser:
    RichHelpFormatter.usage_markup = True
    RichHelpFormatter.styles.update(
        {
            "argparse.args": "cyan",
            "argparse.groups": "green bold",
            "argparse.metavar": "dim cyan",
            "argparse.usage": "dim cyan",
            "argparse.prog": "cyan bold",
        },
    )

    parser = ArgumentParser(
        description="High score server with signed play tokens and a live leaderboard",
        formatter_class=RichHelpFormatter,
        usage="%(prog)s [cyan]\\[options][/]",
    )

    arg = parser.add_argument

    arg(
        "-H",
        "--host",
        type=_listen_addr,
        default=(env.host, env.port),
        help="host (including port) to listen on (default: [yellow]:0[/], any free port)",
        dest="listen",
        metavar="ADDR",
    )
    arg(
        "-p",
        "--pw",
        default=env.admin_password,
        help="password needed to reset the high scores (default: [yellow]changeme[/])",
        dest="admin_password",
        metavar="PW",
    )

    log_lvl_choices = ", ".join(
        f"[{clr}]{abbr}[/]" for abbr, clr in zip(LOG_ABBREV_2_LVL, LOG_LVL_2_COLOR.values(), strict=True)
    )

    arg(
        "-l",
        "--log-level",
        type=str.upper,
        default=env.log_level,
        help=f"base logging level (default: [yellow]INF[/])\t[{log_lvl_choices}]",
        choices=LOG_ABBREV_2_LVL,
        dest="log_level",
        metavar="L",
    )
    return parser


class _Args(NamedTuple):
    host: str
    port: int
    admin_password: str
    log_level: LogLvl


def get_cli_args(argv: Sequence[str] | None = None) -> _Args:
    """Create & return parsed arguments, falling back to environment defaults."""

    parser = _mk_parser(get_env_vars())
    args = parser.parse_args(argv)
    host, port = cast("tuple[str, int]", args.listen)

    return _Args(
        host=host,
        port=port,
        admin_password=args.admin_password,
        log_level=LOG_ABBREV_2_LVL[cast("str", args.log_level)],
    )
