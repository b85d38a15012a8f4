# cleanweb/shared/logging_config.py
import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from opentelemetry import trace

from cleanweb.shared.config import LogFormat, Settings

HANDLER_NAME = "cleanweb.console"


def add_open_telemetry_spans(_, __, event_dict):
    """
    Processor to inject the current TraceID and SpanID into the log entry.
    This links the log to the distributed trace when tracing is enabled.
    """
    span = trace.get_current_span()
    if not span.is_recording():
        event_dict["trace_id"] = None
        event_dict["span_id"] = None
        return event_dict

    ctx = span.get_span_context()
    event_dict["trace_id"] = format(ctx.trace_id, "032x")
    event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def configure_logging(settings: Settings) -> structlog.stdlib.BoundLogger:
    """
    Configures structlog and the standard logging library so that every entry,
    including uvicorn's, goes through the same processor chain to stdout.

    Ambient fields bound with ``structlog.contextvars`` (request id, path, ...)
    are merged into each entry.
    """

    # 1. Processors shared by structlog loggers and foreign (stdlib) records
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        add_open_telemetry_spans,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    # 2. Output format
    if settings.LOG_FORMAT == LogFormat.JSON:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=False)]

    # 3. Structlog hands the event dict over to the stdlib formatter
    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)

    # 4. Replace our own handler on re-configuration, leave foreign ones alone
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())

    # uvicorn installs its own handlers unless told otherwise; route them to root
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True

    return get_logger(settings.APP_NAME)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Accessor for the process-wide logger."""
    return structlog.get_logger(name)


@contextmanager
def logging_scope(settings: Settings) -> Iterator[structlog.stdlib.BoundLogger]:
    """
    Owns the process logger for the lifetime of the host.

    Usage:
        with logging_scope(settings) as log:
            log.info("starting_up")
            run_host()

    Unhandled exceptions are logged as critical and re-raised. Handlers are
    flushed and closed on every exit path.
    """
    log = configure_logging(settings)
    try:
        yield log
    except Exception:
        log.critical("host_terminated_unexpectedly", exc_info=True)
        raise
    finally:
        log.info("host_stopped")
        logging.shutdown()
