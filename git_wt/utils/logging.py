"""Logging setup for wt.

Log records always go to stderr: stdout carries machine output (paths and
the ``WT_CD:`` marker) that the shell function parses.
"""
import copy
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

LOG_DIR = Path.home() / ".git-wt"
LOG_FILE_NAME = "git-wt.log"

DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
SHORT_FORMAT = "[%(name)s] %(message)s"

# Chatty at DEBUG; only their warnings are interesting unless --debug
THIRD_PARTY_LOGGERS = ("git.cmd", "github", "urllib3")


class ColoredFormatter(logging.Formatter):
    """Colors the level name when the target stream is a terminal."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, stream: Optional[TextIO] = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.stream = stream

    def _use_color(self) -> bool:
        stream = self.stream if self.stream is not None else sys.stderr
        try:
            return stream.isatty()
        except (AttributeError, ValueError):
            return False

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelname)
        if color and self._use_color():
            # Other handlers (the debug log file) must see the plain level name
            record = copy.copy(record)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _file_handler() -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(LOG_DIR / LOG_FILE_NAME, mode="w")  # one run per file
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=DEBUG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure the root logger for one wt invocation.

    Args:
        verbose: Show INFO messages
        debug: Show DEBUG messages with timestamps and also write ~/.git-wt/git-wt.log
    """
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if debug:
        root_logger.addHandler(_file_handler())

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if debug:
        console_handler.setFormatter(ColoredFormatter(fmt=DEBUG_FORMAT, datefmt=DATE_FORMAT))
    else:
        console_handler.setFormatter(ColoredFormatter(fmt=SHORT_FORMAT))
    root_logger.addHandler(console_handler)

    third_party_level = logging.DEBUG if debug else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a wt module.

    ``git_wt.services.git.worktrees`` becomes ``git.worktrees`` so the short
    console format stays readable.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Logger instance
    """
    for prefix in ("git_wt.", "services."):
        if name.startswith(prefix):
            name = name[len(prefix):]
    return logging.getLogger(name)
