"""
Tracking module - plane tracking pipeline and its components.

This module provides:
- TrackingEngine: per-frame pipeline with initialize/reset/dispose lifecycle
- FeatureSetManager: refresh policy and corner re-detection
- MotionTracker: Lucas-Kanade point tracking with outlier filtering
- PlaneEstimator: motion-coherence plane hypothesis and confidence
- PoseEstimator: plane motion + orientation fusion
- DiagnosticsOverlay: debug visualization

Example:
    >>> from planetrack.tracking import TrackingEngine
    >>> engine = TrackingEngine().initialize()
    >>> for frame in frames:
    ...     result = engine.process_frame(frame)
"""

from planetrack.tracking.engine import TrackingEngine
from planetrack.tracking.features import FeatureSetManager
from planetrack.tracking.tracker import MotionTracker, TrackStep, filter_tracks
from planetrack.tracking.plane import PlaneEstimator, MotionStatistics, motion_statistics
from planetrack.tracking.pose import PoseEstimator
from planetrack.tracking.overlay import DiagnosticsOverlay, composite, status_lines

__all__ = [
    "TrackingEngine",
    "FeatureSetManager",
    "MotionTracker",
    "TrackStep",
    "filter_tracks",
    "PlaneEstimator",
    "MotionStatistics",
    "motion_statistics",
    "PoseEstimator",
    "DiagnosticsOverlay",
    "composite",
    "status_lines",
]
