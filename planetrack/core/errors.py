"""
Exception hierarchy for the planetrack engine.
"""


class PlanetrackError(Exception):
    """Base class for all planetrack errors."""


class InitializationError(PlanetrackError):
    """The vision primitives library could not be loaded."""


class InvalidFrameError(PlanetrackError):
    """A frame has zero area or an unsupported layout."""


class ConfigError(PlanetrackError, ValueError):
    """A tunable is unknown or outside its valid range."""


class EngineStateError(PlanetrackError, RuntimeError):
    """An operation was invoked in a lifecycle state that forbids it."""
