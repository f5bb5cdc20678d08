"""Console and file logging for the ``dronelink`` loggers."""

from __future__ import annotations

import logging
import sys
from datetime import datetime

from dronelink.config import LoggingConfig

RESET = "\033[0m"
DIM = "\033[2m"

LEVEL_COLORS = {
    logging.DEBUG: "\033[35m",
    logging.INFO: "\033[36m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[41m",
}

FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


class ColorFormatter(logging.Formatter):
    """``[time] [level] message`` with the level colored."""

    def __init__(self, *, colored: bool = True) -> None:
        super().__init__(FORMAT)
        self.colored = colored

    def format(self, record: logging.LogRecord) -> str:
        if not self.colored:
            return super().format(record)
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        color = LEVEL_COLORS.get(record.levelno, "")
        text = f"{DIM}[{ts}]{RESET} {color}[{record.levelname}]{RESET} {record.getMessage()}"
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Attach console (and optional file) handlers to the ``dronelink`` logger.

    Idempotent: handlers installed by an earlier call are replaced.
    """
    level = logging.getLevelNamesMapping().get(config.level.upper())
    if level is None:
        msg = f"Unknown log level: {config.level}"
        raise ValueError(msg)

    logger = logging.getLogger("dronelink")
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ColorFormatter(colored=config.color and sys.stderr.isatty()))
    logger.addHandler(console)

    if config.file:
        file_handler = logging.FileHandler(config.file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FORMAT))
        logger.addHandler(file_handler)

    return logger
