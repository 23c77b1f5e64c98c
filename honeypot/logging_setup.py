"""
Logging setup for the honeypot.

Two sinks are built from the ``logging`` section of the configuration:

- the operational log (stdout, stderr and/or a file), rendered by structlog
  either as key=value console lines inside ``log_pattern`` or as JSON;
- the request log, one JSON object per inbound request in a JSON-lines file.

``setup_logging`` returns explicit handles that are passed to every component
that logs; nothing in the core looks a logger up on its own.
"""
import logging
import sys
from dataclasses import dataclass

import structlog
from structlog.typing import Processor

from .config import LoggingConfig

OPS_LOGGER_NAME = "honeypot"
REQUEST_LOGGER_NAME = "honeypot.requests"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "err": logging.ERROR,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "off": logging.CRITICAL + 10,
}


@dataclass(frozen=True)
class LogHandles:
    ops: structlog.stdlib.BoundLogger
    requests: structlog.stdlib.BoundLogger | None = None


def parse_log_level(name: str) -> int:
    """Map a level name (spdlog or stdlib spelling) to a stdlib level."""
    try:
        return _LEVELS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown log level '{name}'") from None


def emit(logger, level: str, event: str, **fields) -> None:
    """Log an event without letting a logging failure reach the caller."""
    try:
        getattr(logger, level)(event, **fields)
    except Exception:  # noqa: BLE001 - logging is best-effort
        pass


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _ops_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.log_format == "json":
        return structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
        )
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        fmt=config.log_pattern,
    )


def _ops_handler(output: str, config: LoggingConfig) -> logging.Handler:
    if output == "stdout":
        return logging.StreamHandler(sys.stdout)
    if output == "stderr":
        return logging.StreamHandler(sys.stderr)
    return logging.FileHandler(config.log_file_path, mode="a", encoding="utf-8")


def setup_logging(config: LoggingConfig) -> LogHandles:
    """
    Configure structlog and the stdlib handlers behind it.

    Args:
        config: validated logging section of the honeypot configuration

    Returns:
        LogHandles with the operational logger and, unless disabled by an
        empty ``request_log_path``, the request logger.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Operational log
    ops_logger = logging.getLogger(OPS_LOGGER_NAME)
    _reset_handlers(ops_logger)
    ops_logger.setLevel(parse_log_level(config.log_level))
    ops_logger.propagate = False

    formatter = _ops_formatter(config)
    outputs = config.log_outputs or ["stdout"]
    for output in outputs:
        handler = _ops_handler(output, config)
        handler.setFormatter(formatter)
        ops_logger.addHandler(handler)

    ops = structlog.get_logger(OPS_LOGGER_NAME)
    if not config.log_outputs:
        ops.warning("no_log_outputs_configured", fallback="stdout")
    ops.info("operational_logging_initialized", outputs=outputs, level=config.log_level)

    # Request log
    request_logger = logging.getLogger(REQUEST_LOGGER_NAME)
    _reset_handlers(request_logger)
    request_logger.propagate = False

    if not config.request_log_path:
        ops.warning("request_logging_disabled", reason="empty request_log_path")
        return LogHandles(ops=ops, requests=None)

    request_handler = logging.FileHandler(config.request_log_path, mode="a", encoding="utf-8")
    request_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(),
            ],
        )
    )
    request_logger.addHandler(request_handler)
    request_logger.setLevel(logging.INFO)

    ops.info("request_logging_initialized", path=config.request_log_path)
    return LogHandles(ops=ops, requests=structlog.get_logger(REQUEST_LOGGER_NAME))
