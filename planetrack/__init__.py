"""
planetrack - Markerless planar surface tracking
===============================================

Decides frame by frame whether a camera is looking at a stable planar
surface and, if so, produces a placement pose for anchoring virtual
content.

Main modules:
- planetrack.tracking: TrackingEngine and its pipeline components
- planetrack.core: Settings, value types, errors, OpenCV primitives
- planetrack.outputs: Overlay video and pose CSV outputs

Quick start:
    >>> from planetrack import TrackingEngine
    >>> engine = TrackingEngine().initialize()
    >>> engine.update_orientation(alpha=90.0, beta=10.0, gamma=0.0)
    >>> result = engine.process_frame(rgba_frame)
    >>> if result.is_tracking:
    ...     print(result.pose.position)
"""

__version__ = "0.1.0"

from planetrack.core import (
    TrackerSettings,
    FrameResult,
    PoseEstimate,
    OrientationSample,
    PlanetrackError,
    InitializationError,
    ConfigError,
)
from planetrack.tracking import TrackingEngine

__all__ = [
    "__version__",
    "TrackingEngine",
    "TrackerSettings",
    "FrameResult",
    "PoseEstimate",
    "OrientationSample",
    "PlanetrackError",
    "InitializationError",
    "ConfigError",
]
