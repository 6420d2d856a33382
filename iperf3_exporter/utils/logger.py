"""Structured logging configuration."""

import json
import logging
import sys
from pythonjsonlogger import jsonlogger


LOG_FORMATS = ("json", "text")

# Attributes every LogRecord has; anything else came in through extra=
_RECORD_ATTRS = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "taskName"}


class TextFormatter(logging.Formatter):
    """
    key=value line formatter.

    Fields passed with extra= are appended after the message, so structured
    context such as iperf3 stderr is kept in text output too.
    """

    def __init__(self):
        super().__init__("ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(msg_fields)s")

    def format(self, record: logging.LogRecord) -> str:
        fields = [
            f"{key}={_format_value(value)}"
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and key != "msg_fields"
        ]
        record.msg_fields = " ".join([_quote(record.getMessage())] + fields)
        return super().format(record)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _format_value(value) -> str:
    text = str(value)
    if not text or any(c in text for c in ' ="\n'):
        return _quote(text)
    return text


def setup_logger(
    name: str = "iperf3_exporter",
    level: str = "INFO",
    fmt: str = "json"
) -> logging.Logger:
    """
    Configure exporter logging.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Output format, "json" for structured records or "text" for key=value lines

    Returns:
        logging.Logger: Configured logger instance

    Raises:
        ValueError: If the format is not one of LOG_FORMATS
    """
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Unknown log format '{fmt}', expected one of: {', '.join(LOG_FORMATS)}")

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    # Logs go to stderr so stdout stays free for the exposition format
    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(message)s',
            timestamp=True
        )
    else:
        formatter = TextFormatter()
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger
