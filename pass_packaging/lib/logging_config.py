"""JSON logging configuration for pass packaging."""

import logging
import os

from pythonjsonlogger import jsonlogger

LOG_LEVEL_ENV_VAR = "PASS_LOG_LEVEL"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter emitting a fixed field set.

    Fields: timestamp, level, message, exc_info, funcName, lineno, plus
    ``stage`` when a record names the pipeline stage it came from.
    """

    allowed_fields = frozenset(
        {"timestamp", "level", "message", "exc_info", "funcName", "lineno", "stage"}
    )

    def add_fields(self, log_record, record, message_dict):
        """Rename levelname to level and drop everything outside the allowed set.

        Args:
            log_record: Dict to be logged as JSON
            record: LogRecord object from logging framework
            message_dict: Dict containing message and args
        """
        super().add_fields(log_record, record, message_dict)

        if "levelname" in log_record:
            log_record["level"] = log_record.pop("levelname")

        for key in [key for key in log_record if key not in self.allowed_fields]:
            log_record.pop(key)


def _setup_logger() -> logging.Logger:
    """Initialize the package logger, INFO unless PASS_LOG_LEVEL says otherwise."""
    logger = logging.getLogger("pass_packaging")

    # Module reloads must not stack handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        CustomJsonFormatter(
            fmt="%(timestamp)s %(levelname)s %(funcName)s %(lineno)d %(message)s",
            timestamp=True,
        )
    )

    logger.setLevel(os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").upper())
    logger.addHandler(handler)
    logger.propagate = False

    return logger


LOGGER = _setup_logger()
