"""
Logging configuration utilities for the EC2 spot price fetcher.

Plain-text logging is the default; a JSON formatter is available for runs
whose output is shipped somewhere. Pipeline log records can carry a
``batch_id`` and ``operation`` so interleaved worker output stays traceable.
"""

import logging
import sys
import json
import traceback
from datetime import datetime, timezone
from typing import Optional
from pathlib import Path

from ec2spot.utils.exceptions import SpotFetchBaseError


SERVICE_NAME = "ec2spot"

# Attributes every LogRecord has; anything else came in through ``extra``.
_STANDARD_RECORD_KEYS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'taskName', 'batch_id', 'operation', 'service',
])


class StructuredFormatter(logging.Formatter):
    """
    Formatter that renders each record as a single JSON object.

    Error details of SpotFetchBaseError instances are expanded so the
    error code survives into log aggregation.
    """

    def __init__(self, include_stack_trace: bool = False):
        """
        Initialize the structured formatter.

        Args:
            include_stack_trace: Whether to include stack traces in error logs
        """
        super().__init__()
        self.include_stack_trace = include_stack_trace

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
        }

        for key in ('service', 'batch_id', 'operation'):
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_KEYS or key.startswith('_'):
                continue
            log_entry.setdefault("extra", {})[key] = value

        if record.exc_info:
            exc_type, exc_value = record.exc_info[0], record.exc_info[1]
            log_entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None
            }

            if self.include_stack_trace:
                log_entry["exception"]["stack_trace"] = traceback.format_exception(*record.exc_info)

            if isinstance(exc_value, SpotFetchBaseError):
                log_entry["exception"]["error_code"] = exc_value.error_code
                log_entry["exception"]["details"] = exc_value.details

        try:
            return json.dumps(log_entry, default=str, separators=(',', ':'))
        except (TypeError, ValueError):
            # Fallback to simple format if JSON serialization fails
            return f"{log_entry['timestamp']} - {log_entry['logger']} - {log_entry['level']} - {log_entry['message']}"


class ErrorContextFilter(logging.Filter):
    """Stamps the service name and a default batch id onto every record."""

    def __init__(self, service_name: str = SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        if not hasattr(record, 'batch_id'):
            record.batch_id = None
        return True


def setup_logging(
    log_level: str = 'INFO',
    structured: bool = False,
    include_stack_trace: bool = False,
    log_file: Optional[str] = None,
    service_name: str = SERVICE_NAME
) -> None:
    """
    Setup logging configuration for the application.

    Args:
        log_level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Whether to use structured JSON logging
        include_stack_trace: Whether to include stack traces in error logs
        log_file: Optional file path for log output
        service_name: Name of the service for logging context

    Raises:
        ValueError: If log_level is not a known level name
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {log_level}')

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Logs go to stderr so stdout carries only the report
    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    if structured:
        formatter = StructuredFormatter(include_stack_trace=include_stack_trace)
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(service)s - %(threadName)s - %(name)s - '
            '%(levelname)s - %(message)s'
        )

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        handler.addFilter(ErrorContextFilter(service_name))
        root_logger.addHandler(handler)

    root_logger.setLevel(numeric_level)

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug(
        f"Logging configured: level={log_level}, structured={structured}, "
        f"stack_trace={include_stack_trace}, file={log_file}"
    )


class ContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges its context into each call's ``extra``."""

    def process(self, msg, kwargs):
        extra = dict(self.extra)
        extra.update(kwargs.get('extra', {}))
        kwargs['extra'] = extra
        return msg, kwargs


def get_logger_with_context(
    name: str,
    batch_id: Optional[str] = None,
    operation: Optional[str] = None,
    **kwargs
) -> logging.LoggerAdapter:
    """
    Get a logger that tags every record with batch context.

    Args:
        name: Logger name
        batch_id: Optional identifier of the batch run
        operation: Optional operation name for context
        **kwargs: Additional context fields

    Returns:
        LoggerAdapter carrying the context
    """
    context = kwargs.copy()
    if batch_id:
        context['batch_id'] = batch_id
    if operation:
        context['operation'] = operation

    return ContextAdapter(logging.getLogger(name), context)


def log_error_with_context(
    logger,
    error: BaseException,
    message: str,
    batch_id: Optional[str] = None,
    operation: Optional[str] = None,
    **context
) -> None:
    """
    Log an error with full context information.

    Args:
        logger: Logger or LoggerAdapter to use
        error: Exception that occurred
        message: Log message
        batch_id: Optional batch identifier
        operation: Optional operation name
        **context: Additional context fields
    """
    extra = context.copy()
    if batch_id:
        extra['batch_id'] = batch_id
    if operation:
        extra['operation'] = operation

    if isinstance(error, SpotFetchBaseError):
        extra['error_code'] = error.error_code
        extra['error_details'] = error.details

    logger.error(message, exc_info=error, extra=extra)
