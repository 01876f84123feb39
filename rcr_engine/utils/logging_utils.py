"""Logging setup for the RCR engine.

One function configures the shared ``"rcr"`` logger with a timestamped file
handler. Every module fetches it via ``logging.getLogger("rcr")`` and never
adds handlers of its own.
"""

from __future__ import annotations

from pathlib import Path
import logging

LOGGER_NAME = "rcr"


def setup_logging(log_file: str | Path, level: int = logging.INFO, to_stdout: bool = False) -> logging.Logger:
    """Configure and return the shared "rcr" logger.

    Parameters
    ----------
    log_file:
        Destination log file path.
    level:
        Logging level (default INFO).
    to_stdout:
        If True, also echo logs to stderr/console.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    log_path = str(Path(log_file).resolve())
    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(module)s:%(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    has_file_handler = any(
        isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == log_path
        for h in logger.handlers
    )
    if not has_file_handler:
        fh = logging.FileHandler(log_path)
        fh.setLevel(level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    # FileHandler subclasses StreamHandler, so it must not count as the console handler
    has_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )
    if to_stdout and not has_console:
        sh = logging.StreamHandler()
        sh.setLevel(level)
        sh.setFormatter(fmt)
        logger.addHandler(sh)

    # Don't propagate to root to avoid duplicate messages if root is configured elsewhere
    logger.propagate = False
    return logger
