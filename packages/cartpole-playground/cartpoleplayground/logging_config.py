"""Logging configuration for the Cart-Pole Playground package.

Importing this module configures the root logger once. Outside of tests,
records go to a timestamped file under ``./logs/``; under pytest, only
warnings reach stderr. ``set_log_level`` adjusts the package logger and its
file handlers afterwards, e.g. from the ``--log-level`` CLI option.
"""

import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_FILE_PREFIX = "playground"
# Pseudo-level that silences the package logger entirely
LOG_LEVEL_NONE = "NONE"


def _running_under_test() -> bool:
    # Environment variables may not be set yet at import time
    return (
        "PYTEST_CURRENT_TEST" in os.environ
        or os.environ.get("TESTING") == "1"
        or "pytest" in sys.modules
        or bool(sys.argv and sys.argv[0].endswith("pytest"))
    )


def _create_file_handler(log_dir: Path) -> logging.FileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    handler = logging.FileHandler(log_dir / f"{LOG_FILE_PREFIX}_{timestamp}.log")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _configure_root_logging() -> None:
    if _running_under_test():
        logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)
        return

    log_dir = Path.cwd() / "logs"
    try:
        logging.basicConfig(format=LOG_FORMAT, handlers=[_create_file_handler(log_dir)])
    except OSError as exc:
        logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)
        logging.getLogger(__name__).warning(
            "Failed to initialize file logging in %s: %s. Falling back to stderr logging.",
            log_dir,
            exc,
        )


def set_log_level(level: str) -> None:
    """
    Apply a log level to the package logger and the root file handlers.

    Parameters
    ----------
    level : str
        A standard level name (``"DEBUG"``, ``"INFO"``, ...) or ``"NONE"``
        to disable package logging.
    """
    level = level.upper()
    if level == LOG_LEVEL_NONE:
        logger.disabled = True
        return
    if level not in logging.getLevelNamesMapping():
        error_message = f"Unknown log level: {level}"
        raise ValueError(error_message)

    logger.disabled = False
    logger.setLevel(level)
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.FileHandler):
            handler.setLevel(level)


_configure_root_logging()

# Matplotlib font discovery is noisy at DEBUG
logging.getLogger("matplotlib").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)
