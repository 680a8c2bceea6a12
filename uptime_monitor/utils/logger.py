"""Structured logging for the prober, registry and API.

Records carry ``service`` and ``version`` fields, and component loggers bind
their own fields (``component="prober"``) that merge with per-call ``extra``.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional, Union
import structlog
from pythonjsonlogger import jsonlogger

from uptime_monitor import __version__

SERVICE_NAME = "uptime-monitor"
TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
JSON_FORMAT = '%(timestamp)s %(levelname)s %(name)s %(message)s'

# Third-party loggers that are chatty at INFO: one line per scheduler run or request
QUIET_LOGGERS = ("apscheduler", "aiohttp.access")


class ServiceContextFilter(logging.Filter):
    """Stamp every record with the service name and version."""

    def __init__(self, service: str = SERVICE_NAME, version: str = __version__):
        super().__init__()
        self.service = service
        self.version = version

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.version = self.version
        return True


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter whose bound fields merge with per-call ``extra``."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return jsonlogger.JsonFormatter(JSON_FORMAT, timestamp=True)
    return logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    console: bool = True,
    service: str = SERVICE_NAME
) -> None:
    """
    Configure structured logging for the service.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ("json" or "text")
        log_file: Path to log file (None for no file logging)
        console: Whether to log to console
        service: Value of the ``service`` field on every record

    Example:
        ```python
        setup_logging(level="INFO", log_format="json", log_file="logs/uptime.log")
        logger = get_logger(__name__, component="prober")
        logger.info("Probe completed", extra={"alias": "ex", "status_code": 200})
        ```
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = _build_formatter(log_format)
    context_filter = ServiceContextFilter(service=service)

    handlers = []

    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)

    logging.basicConfig(
        level=numeric_level,
        handlers=handlers,
        force=True
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **context: Any) -> Union[logging.Logger, ContextAdapter]:
    """
    Get a logger, optionally bound to default fields.

    Args:
        name: Logger name (usually __name__ of the module)
        **context: Fields added to every record, e.g. ``component="prober"``

    Returns:
        A plain logger, or a ContextAdapter when fields are bound
    """
    logger = logging.getLogger(name)
    if not context:
        return logger
    return ContextAdapter(logger, context)
