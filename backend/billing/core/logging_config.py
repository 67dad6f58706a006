"""
Logging for the billing service
Console output is colored when attached to a terminal; daily files are optional
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty libraries held at WARNING regardless of the service level
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "apscheduler", "aiosqlite")


class LevelColorFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if not color:
            return super().format(record)
        # Other handlers share the record
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _daily_file(log_dir: Path, prefix: str, level: int, day: date) -> logging.Handler:
    handler = logging.FileHandler(log_dir / f"{prefix}_{day:%Y-%m-%d}.log", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = None, stream=None):
    """
    Configure the root logger for the service

    Args:
        log_level: level name; unknown names fall back to INFO
        log_dir: write billing_<day>.log and error_<day>.log here; None logs to the console only
        stream: console stream, stdout by default
    """
    stream = stream or sys.stdout
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(stream)
    use_color = hasattr(stream, "isatty") and stream.isatty()
    console.setFormatter((LevelColorFormatter if use_color else logging.Formatter)(LOG_FORMAT, DATE_FORMAT))
    root.addHandler(console)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        today = date.today()
        root.addHandler(_daily_file(path, "billing", logging.INFO, today))
        root.addHandler(_daily_file(path, "error", logging.ERROR, today))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.debug(f"Logging configured at {logging.getLevelName(root.level)}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
