"""Centralized logging configuration for the thumbnail pipeline."""

import os
import sys
import logging
from typing import Optional

NO_CORRELATION_ID = "-"

STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | %(correlation_id)s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CorrelationIdFilter(logging.Filter):
    """
    Guarantee every record has a ``correlation_id`` attribute.

    StructuredLogger passes the invocation's correlation id through
    ``extra``; records from plain loggers (botocore, the CLI) get ``-``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = NO_CORRELATION_ID
        return True


def setup_logger(
    name: str = "thumbnail-pipeline",
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a logger that writes one line per record to stdout.

    Function runtimes capture stdout, so nothing is written to files. The
    structured format carries the correlation id of the invocation that
    emitted the record, which lets one finalize event be followed across
    download, transform and publish.

    Args:
        name: Logger name (defaults to "thumbnail-pipeline")
        level: Log level override (defaults to LOG_LEVEL or INFO)
        format_type: "structured" or "simple"; LOG_FORMAT takes precedence

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    requested = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, requested, logging.INFO))

    # Warm invocations reuse the process; configure handlers once
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.addFilter(CorrelationIdFilter())

        if os.getenv("LOG_FORMAT", format_type).lower() == "structured":
            formatter = logging.Formatter(STRUCTURED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        else:
            formatter = logging.Formatter(SIMPLE_FORMAT)

        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = "thumbnail-pipeline") -> logging.Logger:
    """Get a logger configured by setup_logger."""
    return setup_logger(name)
