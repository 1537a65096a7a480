"""Logging configuration for treasury-oracle.

Logs always go to stderr so that ``snapshot --json`` output on stdout can be
piped into other tools.
"""

import logging
import os
import sys

# Define TRACE level (lower than DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

NOISY_LOGGERS = ("web3", "urllib3")


class ColoredFormatter(logging.Formatter):
    """Log formatter that colors the level name with ANSI escape codes."""

    COLORS = {
        "TRACE": "\033[90m",  # Dark gray
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def __init__(self, *args, use_color: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if self.use_color and levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[levelname]}{self.BOLD}{levelname}{self.RESET}"
            )
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _resolve_level(log_level: str | None) -> tuple[str, int]:
    name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if name == "TRACE":
        return name, TRACE
    return name, getattr(logging, name, logging.INFO)


def setup_logging(log_level: str | None = None) -> None:
    """Configure logging for the application.

    Uses ``log_level`` when given, otherwise the LOG_LEVEL environment
    variable (defaults to INFO). Colors are disabled when stderr is not a
    terminal or NO_COLOR is set.

    At DEBUG the web3 and urllib3 loggers stay at WARNING; use TRACE to see
    every request they make.
    """
    name, level = _resolve_level(log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ColoredFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            use_color=sys.stderr.isatty() and "NO_COLOR" not in os.environ,
        )
    )

    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )

    if name == "DEBUG":
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)
    elif name == "TRACE":
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(TRACE)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Usually __name__ of the calling module

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
