"""
Core module - shared types, configuration, errors and the vision
primitives adapter.
"""

from planetrack.core.errors import (
    PlanetrackError,
    InitializationError,
    InvalidFrameError,
    ConfigError,
    EngineStateError,
)
from planetrack.core.types import (
    Outcome,
    Correspondence,
    PlaneHypothesis,
    OrientationSample,
    PoseEstimate,
    FrameResult,
    TrackingStatus,
)
from planetrack.core.config import (
    TrackerSettings,
    load_settings,
    save_settings,
    settings_from_env,
)
from planetrack.core.buffers import FrameBuffers
from planetrack.core.primitives import Primitives, VisionPrimitives, load_primitives

__all__ = [
    "PlanetrackError",
    "InitializationError",
    "InvalidFrameError",
    "ConfigError",
    "EngineStateError",
    "Outcome",
    "Correspondence",
    "PlaneHypothesis",
    "OrientationSample",
    "PoseEstimate",
    "FrameResult",
    "TrackingStatus",
    "TrackerSettings",
    "load_settings",
    "save_settings",
    "settings_from_env",
    "FrameBuffers",
    "Primitives",
    "VisionPrimitives",
    "load_primitives",
]
