"""
Gateway logging setup.

One stdout handler on the root logger, plus an optional rotating log file.
Logger names under ``gateway.`` are shortened in the output.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s|%(levelname)-7s|%(short_name)s|%(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES, BACKUP = 10 * 1024 * 1024, 5

_initialized = False


class ShortNameFormatter(logging.Formatter):
    def format(self, record):
        name = record.name
        if name.startswith("gateway."):
            name = name[8:]
        if len(name) > 20:
            name = name[:17] + "..."
        record.short_name = name.ljust(20)
        return super().format(record)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Initialize logging. Safe to call more than once."""
    global _initialized
    if _initialized:
        return

    formatter = ShortNameFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(level.upper())

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    root.addHandler(stdout_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # Access lines come from LoggingMiddleware
    logging.getLogger("uvicorn.access").propagate = False
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _initialized = True
