from __future__ import annotations

import logging
from typing import Final

from creatorpulse.core.config import settings

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s - %(message)s"

# Libraries that log every request or job run at INFO.
_QUIET_LOGGERS: Final[tuple[str, ...]] = ("httpx", "apscheduler.executors.default")


def configure_logging() -> None:
    level = logging.getLevelName(settings.log_level.upper())
    logging.basicConfig(level=level if isinstance(level, int) else logging.INFO, format=LOG_FORMAT)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
