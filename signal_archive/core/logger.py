"""Logging infrastructure setup.

One named logger for the whole package, writing to a log file and the console.
Environment overrides:
    SIGNAL_ARCHIVE_LOG_FILE   path of the log file ("" disables file output)
    SIGNAL_ARCHIVE_LOG_LEVEL  DEBUG / INFO / WARNING / ERROR
"""

import logging
import os
from pathlib import Path
from typing import Optional

_DEFAULT_LOG_FILE = "output/pipeline.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(module)s.%(funcName)s | %(message)s"


def setup_logger(name: str = "signal_archive", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        name (str): The name of the logger.
        log_file (str | None): Log file path; ``None`` reads ``$SIGNAL_ARCHIVE_LOG_FILE``
                               (default ``output/pipeline.log``), ``""`` logs to console only.

    Returns:
        logging.Logger: The configured logger instance.
    """
    logger = logging.getLogger(name)

    # setup_logger runs at import time of every module that logs
    if logger.handlers:
        return logger

    level_name = os.getenv("SIGNAL_ARCHIVE_LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    path = os.getenv("SIGNAL_ARCHIVE_LOG_FILE", _DEFAULT_LOG_FILE) if log_file is None else log_file
    if path:
        log_path = Path(path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


logger = setup_logger()
