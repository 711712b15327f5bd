# src/config/logging_config.py

"""Per-run logging for merch_search.

Every launch writes ``logs/run_<YYYYmmdd_HHMMSS>.log``. All
``merch_search.*`` loggers (coordinator, orchestrator, and one logger
per target id) share that file, so a single run can be read top to
bottom. The console only shows warnings unless ``LOG_CONSOLE_LEVEL``
says otherwise.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_STDERR_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_TIMESTAMP = "%Y-%m-%d %H:%M:%S"

# HTTP / driver chatter that would otherwise flood the run log.
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "openai", "asyncio")


def _level(name: str, default: int) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else default


def setup_logging() -> Path:
    """Attach file and stderr handlers to the ``merch_search`` logger.

    Safe to call more than once; handlers are only attached the first
    time. Returns the path of this run's log file.
    """
    Settings.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    started = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = Settings.LOGS_DIR / f"run_{started}.log"

    app_logger = logging.getLogger("merch_search")
    app_logger.setLevel(_level(Settings.LOG_LEVEL, logging.DEBUG))
    if app_logger.handlers:
        return log_file

    to_file = logging.FileHandler(log_file, encoding="utf-8")
    to_file.setLevel(logging.DEBUG)
    to_file.setFormatter(logging.Formatter(_FILE_FORMAT, _TIMESTAMP))

    to_stderr = logging.StreamHandler(sys.stderr)
    to_stderr.setLevel(
        _level(Settings.LOG_CONSOLE_LEVEL, logging.WARNING)
    )
    to_stderr.setFormatter(logging.Formatter(_STDERR_FORMAT, _TIMESTAMP))

    app_logger.addHandler(to_file)
    app_logger.addHandler(to_stderr)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app_logger.info("Run log opened at %s", log_file)
    return log_file
