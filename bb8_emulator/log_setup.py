"""
Logging setup for bb8sim.

Every module logs through ``logging.getLogger(__name__)``; this only
installs handlers on the root logger:
  - console: rich.logging.RichHandler (or a plain stream handler)
  - file:    optional, DEBUG and up, one line per record
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[str] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure logging and return the CLI logger.

    Uses basicConfig(force=True), so calling it again replaces the
    previous handlers instead of stacking duplicate output.
    """
    handlers = []

    if rich_console:
        ch = RichHandler(
            show_time=False,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    ch.setLevel(console_level)
    handlers.append(ch)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(fh)

    logging.basicConfig(
        level=min(h.level for h in handlers),
        handlers=handlers,
        force=True,
    )

    log = logging.getLogger('bb8sim')
    if log_file:
        log.debug("Log file: %s", log_file)
    return log
