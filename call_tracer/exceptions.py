"""Exception hierarchy for call-tracer.

All exceptions inherit from CallTracerError, providing a consistent error handling interface.
Errors raised by traced functions themselves are never wrapped or translated.
"""


class CallTracerError(Exception):
    """Base exception for all call-tracer errors."""


class InvalidTargetError(CallTracerError, ValueError):
    """Raised when a trace target cannot be resolved to a slot holding a callable."""


class AdviceError(CallTracerError):
    """Raised when a wrapper cannot be installed into or removed from a slot."""
