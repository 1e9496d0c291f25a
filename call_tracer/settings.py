"""Core configuration settings for call tracing.

@public

Settings are loaded from environment variables with .env file support via
pydantic-settings. They seed the process-wide tracing knobs at import time;
the knobs can be changed later through ``call_tracer.tracing.configure``.

Environment variables:
    CALL_TRACER_INDENT_PER_LEVEL: Spaces of indentation per nesting level in
        the default reports (default 2).
    CALL_TRACER_FORCE_EAGER_EVALUATION: Realize lazily produced return values
        before reporting them (default true).

Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file in current directory
    3. Default values

Example:
    >>> from call_tracer.settings import settings
    >>> print(settings.indent_per_level)
    2

Note:
    Settings are loaded once at module import and frozen. Runtime changes go
    through the tracing knobs, not through this object.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Startup configuration for the tracing layer.

    @public

    Attributes:
        indent_per_level: Number of spaces to indent per level of nested
                          trace output in the default reports.

        force_eager_evaluation: When true, iterators returned by traced
                                functions are realized immediately so that
                                trace output is printed in logical order and
                                the trace level seen by nested calls is
                                correct.
    """

    model_config = SettingsConfigDict(
        env_prefix="CALL_TRACER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    indent_per_level: int = Field(default=2, ge=0)
    force_eager_evaluation: bool = True


# Create a single, importable instance of the settings
settings = Settings()
"""Global settings instance, read once when the tracing knobs are created."""
