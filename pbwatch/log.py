"""Logging setup.

All output goes through loguru. Records emitted through the standard
``logging`` module (uvicorn, apscheduler, httpx) are forwarded to loguru so
the whole process shares one sink and one format.
"""

import inspect
import logging
import sys

from pbwatch.config import settings

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> [<level>{level}</level>] "
    "| <cyan>{extra[name]}</cyan> | {message}"
)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.bind(name=record.name).opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


logger.remove()
logger.configure(extra={"name": "pbwatch"})
logger.add(sys.stderr, level=settings.log_level, format=LOG_FORMAT, colorize=True)

logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access", "apscheduler", "httpx"):
    _std_logger = logging.getLogger(_name)
    _std_logger.handlers = [InterceptHandler()]
    _std_logger.propagate = False


def fetcher_logger(name: str):
    return logger.bind(name=f"Fetcher.{name}")


def service_logger(name: str):
    return logger.bind(name=f"Service.{name}")


def task_logger(name: str):
    return logger.bind(name=f"Task.{name}")


def system_logger(name: str):
    return logger.bind(name=f"System.{name}")
