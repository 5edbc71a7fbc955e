# logger.py

import logging
import os
import sys
from datetime import datetime

from tqdm import tqdm

from config import Config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class TqdmLoggingHandler(logging.Handler):
    """Route records through tqdm.write so open crawl bars are not torn."""

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


class CustomFormatter(logging.Formatter):
    """Color console lines by level; plain text when stderr is not a terminal"""

    COLORS = {
        logging.DEBUG: "\x1b[38;20m",
        logging.INFO: "\x1b[38;20m",
        logging.WARNING: "\x1b[33;20m",
        logging.ERROR: "\x1b[31;20m",
        logging.CRITICAL: "\x1b[31;1m",
    }
    RESET = "\x1b[0m"

    def __init__(self, use_color=None):
        super().__init__(f"{LOG_FORMAT} (%(filename)s:%(lineno)d)")
        self.use_color = sys.stderr.isatty() if use_color is None else use_color

    def format(self, record):
        line = super().format(record)
        if not self.use_color:
            return line
        return f"{self.COLORS.get(record.levelno, '')}{line}{self.RESET}"


def setup_logger(name, log_file=None, level=logging.INFO):
    """
    Configure a named logger once.

    :param name: Logger name
    :param log_file: Optional path of a log file; its directory is created
    :param level: Logging level
    :return: logging.Logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Already configured by an earlier import
    if logger.handlers:
        return logger

    console = TqdmLoggingHandler()
    console.setFormatter(CustomFormatter())
    logger.addHandler(console)

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    return logger


def progress_bar(iterable=None, desc=None, total=None, **kwargs):
    """
    Wrap the issues of a crawl in a progress bar.

    :param iterable: Items to iterate over
    :param desc: Label shown left of the bar
    :param total: Item count when iterable has no len()
    :return: tqdm instance
    """
    kwargs.setdefault("disable", not sys.stderr.isatty())
    return tqdm(
        iterable=iterable,
        desc=desc,
        total=total,
        unit="issue",
        leave=False,
        bar_format="{desc}: {n_fmt}/{total_fmt} {bar} [{elapsed}<{remaining}]",
        **kwargs,
    )


timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
log_file = Config.get_log_file("briefing", timestamp) if Config.LOG_TO_FILE else None
logger = setup_logger(
    "project_briefing", log_file, level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)
)
