"""Structured logging with per-run context using structlog contextvars."""

import logging

import structlog

_configured = False


def setup_structured_logging(level: str = "WARNING") -> None:
    """Configure structlog with JSON output and per-run context.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    global _configured
    if _configured:
        return

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,  # Inject run context
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
    )

    _configured = True


def bind_run_context(run_id: str) -> None:
    """Bind the run id for all subsequent logs in this async context."""
    structlog.contextvars.bind_contextvars(run_id=run_id)


def bind_stage(stage: str) -> None:
    """Record the stage the run has entered."""
    structlog.contextvars.bind_contextvars(stage=stage)


def clear_run_context() -> None:
    """Clear run context after the run completes."""
    structlog.contextvars.clear_contextvars()


def get_run_logger(name: str = "graphql_endpoint_scraper") -> structlog.stdlib.BoundLogger:
    """Get a structlog logger carrying the run context."""
    return structlog.get_logger(name)