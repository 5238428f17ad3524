"""
Logging for imagemage.

Every run writes a fresh imagemage.log under get_log_dir(). With debug
output on, records are echoed to stderr too; stdout is reserved for
command output.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .config import APP_NAME, APP_VERSION, get_log_dir

LOGGER_NAME = "imagemage"
LOG_FILE_NAME = "imagemage.log"

FILE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_logger: Optional[logging.Logger] = None
_log_file: Optional[Path] = None


def _file_handler(log_dir: Path) -> Optional[logging.FileHandler]:
    """Handler truncating log_dir/imagemage.log, or None if the file can't be opened."""
    global _log_file
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / LOG_FILE_NAME, mode="w", encoding="utf-8")
    except OSError as e:
        print(f"[WARN] File logging disabled: {e}", file=sys.stderr)
        _log_file = None
        return None

    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    _log_file = log_dir / LOG_FILE_NAME
    return handler


def _console_handler() -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _install_excepthook(logger: logging.Logger) -> None:
    """Record uncaught exceptions in the log before the default hook prints them."""
    previous_hook = sys.excepthook

    def hook(exc_type, exc_value, exc_traceback):
        if not issubclass(exc_type, KeyboardInterrupt):
            logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))
        previous_hook(exc_type, exc_value, exc_traceback)

    sys.excepthook = hook


def setup_logging(debug: Optional[bool] = None) -> logging.Logger:
    """
    Configure the imagemage logger. Later calls return the same logger.

    Args:
        debug: Echo debug records to stderr. None means "use the DEBUG
            environment variable".

    Returns:
        The configured logger.
    """
    global _logger

    if _logger is not None:
        return _logger

    if debug is None:
        debug = bool(os.environ.get("DEBUG"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.handlers.clear()

    file_handler = _file_handler(get_log_dir())
    if file_handler is not None:
        logger.addHandler(file_handler)
    if debug:
        logger.addHandler(_console_handler())

    logger.debug(f"{APP_NAME} {APP_VERSION} on Python {sys.version.split()[0]}")
    logger.debug(f"Log file: {_log_file}")

    _install_excepthook(logger)
    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """The imagemage logger, configured on first use."""
    return _logger if _logger is not None else setup_logging()


def get_log_file_path() -> Optional[Path]:
    """Path of this run's log file, or None when file logging is off."""
    return _log_file


def log_debug(message: str) -> None:
    get_logger().debug(message)


def log_info(message: str) -> None:
    get_logger().info(message)


def log_warning(message: str) -> None:
    get_logger().warning(message)


def log_error(message: str, detail: str = "") -> None:
    """Log message, with ": detail" appended when detail is given."""
    get_logger().error(f"{message}: {detail}" if detail else message)


# =============================================================================
# Event helpers
# =============================================================================

def log_api_call(model_name: str, success: bool, details: str = "") -> None:
    """
    Record one generateContent round trip.

    Successes go in at INFO, failures at ERROR.
    """
    outcome = "ok" if success else "FAILED"
    message = f"generateContent [{outcome}] {model_name}"
    if details:
        message += f" - {details}"
    get_logger().log(logging.INFO if success else logging.ERROR, message)


def log_batch_start(label: str, total: int) -> None:
    get_logger().info(f"Starting {total} {label}(s)")


def log_batch_complete(label: str, succeeded: int, total: int) -> None:
    """Summary line for a batch; logged as an error when nothing succeeded."""
    level = logging.INFO if succeeded else logging.ERROR
    get_logger().log(level, f"Finished {label}(s): {succeeded}/{total} succeeded")
