"""Per-run state: loaded configuration, HTTP session and log sink."""

import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import requests

from albumsync.config import SyncConfig

PACKAGE_LOGGER = "albumsync"

FILE_FORMAT = "[%(asctime)s] %(levelname)s %(message)s"
CONSOLE_FORMAT = "%(message)s"


@dataclass
class RunContext:
    """Everything a single sync run needs, passed explicitly to each component."""

    config: SyncConfig
    session: requests.Session
    log_path: Path

    @property
    def local_folder(self) -> Path:
        return Path(self.config.local_folder)

    def close(self):
        self.session.close()


@contextmanager
def run_logging(log_path: Path) -> Iterator[logging.Logger]:
    """Send albumsync log records to the console and append them to log_path.

    Handlers are removed and closed again when the block exits, so repeated
    runs in the same process don't stack them.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    file_formatter = logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S UTC")
    file_formatter.converter = time.gmtime
    file_handler.setFormatter(file_formatter)

    # Progress goes to stdout, problems to stderr
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.addFilter(lambda record: record.levelno < logging.WARNING)

    error_handler = logging.StreamHandler(sys.stderr)
    error_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    error_handler.setLevel(logging.WARNING)

    logger = logging.getLogger(PACKAGE_LOGGER)
    previous_level = logger.level
    logger.setLevel(logging.INFO)
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    logger.addHandler(error_handler)
    try:
        yield logger
    finally:
        logger.removeHandler(error_handler)
        logger.removeHandler(console_handler)
        logger.removeHandler(file_handler)
        file_handler.close()
        logger.setLevel(previous_level)
