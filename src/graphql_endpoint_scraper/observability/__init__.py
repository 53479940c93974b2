"""Observability helpers: structured logging bound to a scrape run."""

from .logging import bind_run_context, bind_stage, clear_run_context, get_run_logger, setup_structured_logging

__all__ = [
    "bind_run_context",
    "bind_stage",
    "clear_run_context",
    "get_run_logger",
    "setup_structured_logging",
]
