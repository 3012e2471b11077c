"""
Logging setup shared by the API server and the CLI.

Application modules log through loguru; the storage backends and uvicorn use
stdlib loggers, which are configured here to the same level.
"""

import logging
import logging.config
import os
import sys

from loguru import logger as loguru_logger

from slideavatar.configs.config import config

_STDLIB_LOGGERS = ("slideavatar", "uvicorn", "fastapi")
_STDLIB_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    log_dir: str | None = None,
    component: str = "default",
) -> None:
    """Configure console logging, plus a rotating file when ``log_file`` is set.

    ``component`` is only used to name the file when ``log_file`` is empty.
    """
    level = (log_level or config.log_level).upper()
    handlers: dict[str, dict[str, str | int]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        }
    }

    log_path = None
    if log_file is not None:
        directory = log_dir or config.log_dir
        os.makedirs(directory, exist_ok=True)
        log_path = os.path.join(directory, log_file or f"{component}.log")
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "filename": log_path,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": _STDLIB_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"}
            },
            "handlers": handlers,
            "loggers": {
                name: {"level": level, "handlers": list(handlers), "propagate": False}
                for name in _STDLIB_LOGGERS
            },
            "root": {"level": level, "handlers": list(handlers)},
        }
    )

    loguru_logger.remove()
    loguru_logger.add(sys.stderr, level=level)
    if log_path:
        loguru_logger.add(log_path, level=level, rotation="10 MB", retention=5)
