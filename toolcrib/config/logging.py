"""Structured logging for the stock ledger.

Development gets a colored console; staging and production emit one JSON
object per line. The app identity stamped on each event comes from the
``Settings`` the process was configured with.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from toolcrib.config.settings import Settings

# Chatty below WARNING; ledger events are what operators read
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access", "httpx")


class AppContext:
    """Processor that stamps app, version and environment on every event."""

    def __init__(self, settings: Settings):
        self.fields = {
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        }

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        for key, value in self.fields.items():
            event_dict.setdefault(key, value)
        return event_dict


def build_processors(settings: Settings) -> list[Processor]:
    """Processor chain for the configured environment."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        AppContext(settings),
    ]
    if settings.environment == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors.extend([
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ])
    return processors


def configure_logging(settings: Settings) -> None:
    """Route structlog through stdlib logging at ``settings.log_level``."""
    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(settings.log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
