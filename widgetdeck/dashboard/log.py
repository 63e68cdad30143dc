"""Loguru setup shared by the CLI and the SQL service.

Every record carries a ``component`` tag (``cli`` or ``sql-service``) so the
two processes can share a terminal or log collector.  Stdlib loggers used by
the stack (uvicorn, httpx, boto3, sqlalchemy) are routed into loguru.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[component]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Library loggers held at WARNING regardless of the configured level.
NOISY_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "botocore",
    "boto3",
    "s3transfer",
    "urllib3",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
)


class _StdlibBridge(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so the record points at the caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", *, component: str = "cli") -> None:
    """Make loguru the only sink, tagged with ``component``.

    Safe to call more than once; each call replaces the previous sinks.
    """
    level = level.upper()

    logger.remove()
    logger.configure(extra={"component": component})
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging configured for {} at {}", component, level)
