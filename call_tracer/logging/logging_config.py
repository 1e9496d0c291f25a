"""Logging setup for call-tracer's own diagnostics.

@public

The tracer is loaded into programs it does not own, so the built-in default
only touches the library's logger: one stderr handler on it, no propagation,
and the host's root logger and handlers are left alone. A YAML file, when one
is given, is applied with ``logging.config.dictConfig`` as written.

Environment variables:
    CALL_TRACER_LOGGING_CONFIG: Path to a logging.yml in dictConfig format
    CALL_TRACER_LOG_LEVEL: Level of the library logger (INFO, DEBUG, etc.)
"""

import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from prefect.logging import get_logger

LIBRARY_LOGGER = "call_tracer"

# Marks the handler installed by the default config so re-applying replaces it
HANDLER_NAME = "call_tracer.console"

DEFAULT_LOG_LEVELS = {
    "call_tracer": "INFO",
    "call_tracer.tracing": "INFO",
}


class LoggingConfig:
    """Logging configuration for the library's diagnostics.

    @public

    Configuration source, first match wins:
        1. Explicit config_path parameter
        2. CALL_TRACER_LOGGING_CONFIG environment variable
        3. Built-in default (library logger only)

    Example:
        >>> LoggingConfig().apply()
        >>> LoggingConfig(Path("tracer_logging.yml")).apply()
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self._get_default_config_path()
        self._config: Optional[Dict[str, Any]] = None

    @staticmethod
    def _get_default_config_path() -> Optional[Path]:
        if env_path := os.environ.get("CALL_TRACER_LOGGING_CONFIG"):
            return Path(env_path)
        return None

    @property
    def uses_file(self) -> bool:
        return self.config_path is not None and self.config_path.exists()

    def load_config(self) -> Dict[str, Any]:
        """Load the configuration, cached after the first call.

        Returns:
            The YAML file's contents, or the built-in default. Both are in
            ``logging.config.dictConfig`` format.
        """
        if self._config is None:
            if self.uses_file:
                assert self.config_path is not None
                with open(self.config_path, "r") as f:
                    self._config = yaml.safe_load(f)
            else:
                self._config = self._get_default_config()
        assert self._config is not None
        return self._config

    @staticmethod
    def _get_default_config() -> Dict[str, Any]:
        """Default: ``HH:MM:SS.mmm | LEVEL | logger.name - message`` on stderr.

        Stdout is left to the trace reports. The root logger is not configured.
        """
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s.%(msecs)03d | %(levelname)-7s | %(name)s - %(message)s",
                    "datefmt": "%H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {
                LIBRARY_LOGGER: {
                    "level": os.environ.get("CALL_TRACER_LOG_LEVEL", "INFO"),
                    "handlers": ["console"],
                    "propagate": False,
                },
            },
        }

    def apply(self) -> None:
        """Apply the configuration.

        A YAML file goes through ``dictConfig`` unchanged. The default is
        installed on the library logger directly, since ``dictConfig`` would
        also flush and close every handler the host program has registered.
        """
        config = self.load_config()
        if self.uses_file:
            logging.config.dictConfig(config)
        else:
            _configure_library_logger(config)


def _configure_library_logger(config: Dict[str, Any]) -> None:
    formatter = config["formatters"]["standard"]
    options = config["loggers"][LIBRARY_LOGGER]

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(formatter["format"], formatter["datefmt"]))

    logger = get_logger(LIBRARY_LOGGER)
    for existing in [h for h in logger.handlers if h.get_name() == HANDLER_NAME]:
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(options["level"])
    logger.propagate = options["propagate"]


_logging_config: Optional[LoggingConfig] = None


def setup_logging(config_path: Optional[Path] = None, level: Optional[str] = None):
    """Set up logging for the library.

    @public

    Args:
        config_path: Optional YAML logging configuration file. If None, uses
                    CALL_TRACER_LOGGING_CONFIG or the built-in default.
        level: Optional level override for the library loggers.
    """
    global _logging_config

    _logging_config = LoggingConfig(config_path)
    _logging_config.apply()

    if level:
        for logger_name in DEFAULT_LOG_LEVELS:
            get_logger(logger_name).setLevel(level)


def get_tracer_logger(name: str):
    """Get a logger for tracer components, setting up logging on first use.

    @public
    """
    if _logging_config is None:
        setup_logging()

    return get_logger(name)
