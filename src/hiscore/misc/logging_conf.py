from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, ClassVar, Final, Literal, cast, override

from rich.markup import escape

from .utils import cerr, cout

if TYPE_CHECKING:
    type LogLvl = Literal[10, 20, 30, 40, 50]


LOG_ABBREV_2_LVL: Final[dict[str, LogLvl]] = {
    "DBG": logging.DEBUG,
    "INF": logging.INFO,
    "WRN": logging.WARNING,
    "ERR": logging.ERROR,
    "CRT": logging.CRITICAL,
}


LOG_LVL_2_COLOR: Final = {
    logging.DEBUG: "green",
    logging.INFO: "cyan",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}


class RichStyleHandler(logging.Handler):
    """Logging handler printing through the rich consoles.

    Message text is escaped before styling: log lines carry player names
    and request paths, which must not be read as rich markup.
    """

    LVL_2_ABBREV: ClassVar = {v: k for k, v in LOG_ABBREV_2_LVL.items()}

    @override
    def __init__(self) -> None:
        super().__init__()
        self._stdout = cout
        self._stderr = cerr

    @override
    def emit(self, record: logging.LogRecord) -> None:
        try:
            fmted = RichStyleHandler.fmt_msg(escape(self.format(record)), cast("LogLvl", record.levelno))
        except Exception:  # noqa: BLE001
            self.handleError(record)
            return

        if fmted is None:
            self.handleError(record)
            return

        cons = self._stderr if record.levelno >= logging.WARNING else self._stdout
        cons.print(fmted, highlight=False)

    @classmethod
    def fmt_msg(cls, msg: str, lvlno: LogLvl) -> str | None:
        try:
            color = LOG_LVL_2_COLOR[lvlno]
            lvl_abbrev = cls.LVL_2_ABBREV[lvlno]
        except KeyError:
            return None

        time_str = time.strftime("%X")
        msg = f"[{color}]{msg}[/]" if lvlno >= logging.WARNING else msg
        return f"[dim][{color}][{lvl_abbrev}][/] [white]({time_str})[/] ::[/] {msg}"


def init_logging(lvl: LogLvl) -> None:
    """Initialize logging.

    uvicorn is started with ``log_config=None`` so its loggers propagate
    here as well.

    Args:
        lvl: Logging level
    """
    logging.basicConfig(
        level=lvl,
        format="%(message)s",
        handlers=[RichStyleHandler()],
        force=True,
    )
