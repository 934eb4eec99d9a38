"""Structured logging configuration for the load generator.

Console output during development, JSON lines in production so runs can be
shipped to a log pipeline. Credentials never reach the log stream.
"""

import logging
import sys
from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from keycloak_loadgen.config import LoggingSettings

MASK = "***MASKED***"


class SensitiveFieldMasker:
    """structlog processor masking every key that contains a sensitive fragment.

    Matching is case-insensitive and reaches into nested mappings, so a token
    response logged as a dict is masked as well as a flat ``access_token=`` key.
    """

    def __init__(self, fragments: Iterable[str]) -> None:
        self.fragments = tuple(fragment.lower() for fragment in fragments)

    def __call__(self, logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        return self._mask(event_dict)

    def _is_sensitive(self, key: Any) -> bool:
        return isinstance(key, str) and any(fragment in key.lower() for fragment in self.fragments)

    def _mask(self, mapping: Mapping[Any, Any]) -> dict[Any, Any]:
        masked = {}
        for key, value in mapping.items():
            if self._is_sensitive(key):
                masked[key] = MASK
            elif isinstance(value, Mapping):
                masked[key] = self._mask(value)
            else:
                masked[key] = value
        return masked


def app_context(app_name: str) -> Processor:
    """Return a processor stamping ``app=<app_name>`` on every entry."""

    def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["app"] = app_name
        return event_dict

    return add_app_context


def build_processors(settings: LoggingSettings) -> list[Processor]:
    """Processor chain for ``settings.env``; the renderer is always last."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        app_context(settings.app_name),
        SensitiveFieldMasker(settings.sensitive_fields),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.env == "production":
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Route structlog through the stdlib root logger on stdout."""
    settings = settings or LoggingSettings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
        force=True,
    )

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
