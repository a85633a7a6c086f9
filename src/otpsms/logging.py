"""Structured logging for otpsms providers and the otpsms CLI."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

# Event keys that may carry secrets or OTP values.
_REDACTED_KEYS = frozenset({"api_key", "apikey", "body", "otp"})


def redact_secrets(
    _logger: Any, _method: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def _renderer(fmt: str, *, colors: bool) -> structlog.types.Processor:
    if fmt == "console":
        return structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.processors.JSONRenderer()


def setup_logging(level: str = "INFO", fmt: str = "json", stream: TextIO | None = None) -> None:
    """Route the providers' ``channels.*`` events through stdlib logging.

    ``fmt`` is ``"json"`` when a host ships records to a collector, or
    ``"console"`` for the CLI. Gateway API keys and OTP bodies are masked by
    ``redact_secrets`` before any renderer sees them, including records from
    the host's own stdlib loggers.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(fmt, colors=stream is None),
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # httpx would log each gateway POST URL, which embeds the account SID
    for name in ("httpcore", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)
