# screening/utils/logger.py

"""
Structured logging configuration (structlog).

One configuration for the whole service: JSON lines for production and
audit trails, coloured key/value output for an interactive terminal.
Source outcomes, enrichment fallbacks and retrieval failures are all
logged through here so a screening can be reconstructed afterwards.
"""

import sys
import logging

import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder
from structlog.processors import EventRenamer, StackInfoRenderer, dict_tracebacks
from structlog.stdlib import add_log_level, add_logger_name

from config.settings import get_settings


def key_stripper(keys):
    def processor(logger, method_name, event_dict):
        for key in keys:
            event_dict.pop(key, None)
        return event_dict
    return processor


_logging_configured = False


def configure_logging(force: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    Console rendering is used when LOG_FORMAT=text, or when running on a TTY
    at DEBUG/INFO; everything else renders JSON.
    """
    global _logging_configured
    if _logging_configured and not force:
        return

    settings = get_settings()
    use_console = settings.log_format == "text" or (
        settings.log_level in ("DEBUG", "INFO") and sys.stderr.isatty()
    )

    shared_processors = [
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_logger_name,
        add_log_level,
        StackInfoRenderer(),
        CallsiteParameterAdder(parameters=[
            CallsiteParameter.MODULE,
            CallsiteParameter.LINENO,
            CallsiteParameter.FUNC_NAME,
        ]),
        key_stripper(keys=["_record", "_from_structlog"]),
    ]

    if use_console:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True, sort_keys=True)
        ]
    else:
        processors = shared_processors + [
            EventRenamer("message"),
            dict_tracebacks,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]

    # stdlib logging carries requests/urllib3/httpx output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=settings.log_level,
    )

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Return a configured structlog logger.

    Args:
        name: Component name shown in every event (e.g. "FanOut").
    """
    configure_logging()
    return structlog.get_logger(name)
