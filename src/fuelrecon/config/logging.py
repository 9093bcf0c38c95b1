"""Root logger setup for the command line entry point."""

from __future__ import annotations

import logging
import os
from typing import Final

LOG_LEVEL_ENV: Final[str] = "FUELRECON_LOG_LEVEL"
# request lines from these drown the price listings at INFO
_CHATTY_LOGGERS: Final = ("httpx", "hishel", "httpx_retries")


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger once with a terse CLI format.

    ``level`` defaults to ``FUELRECON_LOG_LEVEL`` (a level name) and then INFO.
    Pass ``force=True`` to replace handlers installed earlier.
    """

    if level is None:
        configured = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
        resolved = logging.getLevelName(configured) if configured else logging.INFO
        level = resolved if isinstance(resolved, int) else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
