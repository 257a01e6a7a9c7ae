"""
Logging Configuration

structlog setup shared by the property export and lien enrichment jobs.
Each job binds its name once so every event it emits can be filtered by job.
"""
import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from config.settings import settings


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Stamp the deployment environment and state on every entry.
    """
    event_dict["environment"] = settings.environment
    event_dict["state"] = settings.lgbs_state
    return event_dict


def setup_logging() -> structlog.BoundLogger:
    """
    Configure structured logging for a batch run.

    Uses settings.log_level and settings.log_format ("json" or "console").

    Returns:
        Configured structlog logger instance
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.processors.ExceptionRenderer())
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


def bind_job_context(job: str, **fields: Any) -> None:
    """
    Attach the job name (and any extra fields) to all subsequent log events.

    Args:
        job: Batch job identifier, e.g. "property_export"
        **fields: Additional context such as test_limit
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(job=job, **fields)


def get_logger(name: str = None) -> structlog.BoundLogger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
