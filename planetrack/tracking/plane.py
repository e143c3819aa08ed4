"""
Planar surface hypothesis from motion coherence.

If the tracked points all move by roughly the same image displacement,
they are taken to lie on one rigid surface. Confidence in that
hypothesis grows on coherent frames and decays otherwise, giving
hysteresis against single-frame noise.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from planetrack.core.config import TrackerSettings
from planetrack.core.types import Correspondence, PlaneHypothesis


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MotionStatistics:
    """Mean displacement and its population variance."""
    mean_dx: float
    mean_dy: float
    variance: float


def motion_statistics(correspondences: Sequence[Correspondence]) -> MotionStatistics:
    """
    Compute mean displacement and the mean squared deviation from it.

    The variance is summed over both axes, in squared pixels.
    """
    displacement = np.array(
        [(c.dx, c.dy) for c in correspondences], dtype=np.float64
    ).reshape(-1, 2)
    mean = displacement.mean(axis=0)
    deviation = displacement - mean
    variance = float(np.mean(np.sum(deviation * deviation, axis=1)))
    return MotionStatistics(float(mean[0]), float(mean[1]), variance)


class PlaneEstimator:
    """
    Maintains plane confidence and the latest plane hypothesis.

    The hypothesis is only replaced on coherent frames; on other frames
    the previous one is kept so diagnostics can still show it.
    """

    def __init__(self, settings: TrackerSettings):
        self.settings = settings
        self.confidence = 0.0
        self.hypothesis: PlaneHypothesis | None = None
        self.last_statistics: MotionStatistics | None = None

    def _increase(self) -> None:
        self.confidence = min(1.0, self.confidence + self.settings.confidence_step_up)

    def _decrease(self) -> None:
        self.confidence = max(0.0, self.confidence - self.settings.confidence_step_down)

    def update(
        self,
        correspondences: Sequence[Correspondence],
        features: np.ndarray,
    ) -> bool:
        """
        Update confidence from one frame of correspondences.

        Args:
            correspondences: This frame's tracked (previous, current) pairs
            features: N x 2 current feature positions

        Returns:
            True if a plane is trackable this frame
        """
        s = self.settings

        if len(correspondences) < s.min_correspondences:
            self._decrease()
            self.last_statistics = None
            return False

        stats = motion_statistics(correspondences)
        self.last_statistics = stats

        if stats.variance >= s.coherence_threshold:
            self._decrease()
            logger.debug(
                "Incoherent motion (variance %.1f), confidence %.2f",
                stats.variance, self.confidence,
            )
            return False

        self._increase()

        features = np.asarray(features, dtype=np.float64).reshape(-1, 2)
        if len(features) > 0:
            cx, cy = features.mean(axis=0)
        else:
            cx, cy = np.mean([c.curr for c in correspondences], axis=0)

        self.hypothesis = PlaneHypothesis(
            center=(float(cx), float(cy)),
            confidence=self.confidence,
            motion=(stats.mean_dx, stats.mean_dy),
        )
        return self.confidence > s.acceptance_threshold

    def reset(self) -> None:
        self.confidence = 0.0
        self.hypothesis = None
        self.last_statistics = None
