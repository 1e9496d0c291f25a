"""Logging infrastructure for call-tracer.

@public

Provides Prefect-integrated logging for the library's own diagnostics
(trace/untrace notices, configuration warnings). Trace reports are written to
the report stream, not to these loggers.

Key components:
    get_tracer_logger: Factory function for creating library loggers
    setup_logging: Initialize logging configuration from YAML
    LoggingConfig: Configuration class for logging settings

Example:
    >>> from call_tracer.logging import get_tracer_logger
    >>>
    >>> logger = get_tracer_logger(__name__)
    >>> logger.info("Tracing started")
"""

from .logging_config import LoggingConfig, get_tracer_logger, setup_logging

__all__ = [
    "LoggingConfig",
    "setup_logging",
    "get_tracer_logger",
]
