"""
Exception hierarchy.

Every error raised on purpose by the package derives from SimsFlanaganError,
so the optimizer layer can turn any of them into a rejected candidate with a
single except clause.
"""


class SimsFlanaganError(Exception):
    """Base class for all package errors."""


class ConfigurationError(SimsFlanaganError, ValueError):
    """Invalid leg configuration or output destination.

    Raised for non-increasing boundary epochs, non-positive gravitational
    parameter, destinations of the wrong length, legs evaluated before they
    are fully configured, and malformed import payloads.
    """


class PropagationError(SimsFlanaganError, RuntimeError):
    """A propagator could not produce a result for finite inputs."""
