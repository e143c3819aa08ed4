"""
Feature set refresh policy and re-detection.
"""

import logging

import numpy as np

from planetrack.core.config import TrackerSettings
from planetrack.core.primitives import Primitives
from planetrack.core.types import Outcome, empty_points


logger = logging.getLogger(__name__)


class FeatureSetManager:
    """
    Decides when the tracked point set must be re-detected and runs the
    corner detector when it is.

    A refresh happens when too few points survive tracking, or on every
    ``refresh_interval``-th frame regardless of how many points remain.
    """

    def __init__(self, settings: TrackerSettings):
        self.settings = settings

    def needs_refresh(self, point_count: int, frame_count: int) -> bool:
        """Check whether the point set should be re-detected this frame."""
        if point_count < self.settings.min_features:
            return True
        return frame_count % self.settings.refresh_interval == 0

    def detect(self, primitives: Primitives, gray: np.ndarray) -> np.ndarray:
        """
        Detect a fresh point set on ``gray``.

        Detection failures are logged and yield an empty set; the refresh
        check brings detection back on the next frame.

        Returns:
            N x 2 float32 array of corner positions
        """
        s = self.settings
        try:
            outcome = primitives.detect_corners(
                gray, s.max_corners, s.quality_level, s.min_distance, s.block_size
            )
        except Exception as e:
            logger.exception("Feature detection raised")
            outcome = Outcome.failure(str(e))

        if not outcome.ok:
            logger.error("Feature detection failed: %s", outcome.reason)
            return empty_points()

        points = np.asarray(outcome.value, dtype=np.float32).reshape(-1, 2)
        logger.debug("Detected %d features", len(points))
        return points
