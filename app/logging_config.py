# JSON in prod or with LOG_JSON=true, console renderer otherwise.
import logging

import structlog
from structlog.typing import Processor

from app.config import settings

def _level() -> int:
    return getattr(logging, settings.log_level.upper(), logging.INFO)

def _use_json() -> bool:
    if settings.log_json is not None:
        return settings.log_json
    return settings.app_env == "prod"

def configure_logging() -> None:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if _use_json():
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
