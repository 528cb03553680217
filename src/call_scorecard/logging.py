import logging
import os
import sys

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "call-scorecard"
QUIET_LOGGERS = ["pika", "urllib3", "httpx", "httpcore"]


def setup_logging():
    """
    Configures structured JSON logging on stdout for the stage worker.

    Every record carries timestamp, level, logger name, message and the
    ddtrace ``trace_id``/``span_id`` so log lines join up with APM traces.
    The root level comes from ``LOG_LEVEL`` (default INFO); broker and HTTP
    client libraries are capped at WARNING.

    Returns:
        logging.Logger: The configured root logger instance.
    """
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s",
        static_fields={"service": SERVICE_NAME},
    )
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    root_logger.handlers = [stream_handler]

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    return root_logger
