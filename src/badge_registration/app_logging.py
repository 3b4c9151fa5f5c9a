"""Logging configuration helpers."""

import logging

LOGGER_NAME = "badge_registration"
_RECORD_FIELDS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
}


class ContextFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_FIELDS
        }
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{line} [{pairs}]"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Configure the package logger with a single stream handler."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
