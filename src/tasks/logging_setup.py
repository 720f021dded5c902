from __future__ import annotations

import logging
import sys
from typing import Optional, Union

from .settings import get_settings


class _LibraryNoiseFilter(logging.Filter):
    """
    Keep task client logs, but only let HTTP transport libraries through at
    WARNING and above (httpx logs every request at INFO).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(("httpx", "httpcore")):
            return record.levelno >= logging.WARNING
        return True


# PUBLIC_INTERFACE
def setup_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    Configure a single stderr handler on the root logger.

    The level defaults to TASKS_LOG_LEVEL. Existing root handlers are removed
    so that repeated calls do not duplicate output.
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.addFilter(_LibraryNoiseFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
