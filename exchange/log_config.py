"""structlog configuration for the exchange service."""

import logging
import os

import structlog


def configure_logging(level: int = logging.INFO, json: bool | None = None) -> None:
    """Configure structlog for console or JSON output.

    Args:
        level: Minimum log level to emit
        json: Render JSON lines instead of console output. Defaults to the
            EXCHANGE_LOG_JSON environment variable.
    """
    if json is None:
        json = os.environ.get("EXCHANGE_LOG_JSON", "false").lower() in ("true", "1", "yes")

    processors: list[structlog.types.Processor] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
