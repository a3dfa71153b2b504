"""
Logging configuration

Every module logs through the shared "taskboard" logger and prefixes its
messages with the component name ("[Firestore] ...", "[TaskMirror] ...").
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union
from taskboard.config.settings import settings
from taskboard.config.constants import LOG_FORMAT, LOG_DATE_FORMAT

LOG_FILE_NAME = "taskboard.log"


def setup_logger(
    name: str = "taskboard",
    level: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure a logger writing to stdout and to a log file

    Calling it again for the same name replaces the handlers, so a second
    call never duplicates output.

    Args:
        name: Logger name
        level: Level name for stdout ("DEBUG", "INFO", ...), defaults to LOG_LEVEL
        log_file: Log file path, defaults to LOG_DIR/taskboard.log; the file
            always receives DEBUG records

    Returns:
        Configured logger instance
    """
    console_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    path = Path(log_file) if log_file is not None else Path(settings.LOG_DIR) / LOG_FILE_NAME
    formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


# Global logger instance
logger = setup_logger()
