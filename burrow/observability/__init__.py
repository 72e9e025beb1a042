"""Observability module for structured logging."""

from burrow.observability.logging import bind_run_context, configure_logging


__all__ = [
    "bind_run_context",
    "configure_logging",
]
