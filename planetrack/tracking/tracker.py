"""
Frame-to-frame point tracking using Lucas-Kanade optical flow.

MotionTracker advances the current point set into the next frame and
keeps only correspondences that are valid, finite and below the outlier
displacement bound.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from planetrack.core.config import TrackerSettings
from planetrack.core.primitives import Primitives
from planetrack.core.types import Correspondence, Outcome, empty_points


logger = logging.getLogger(__name__)


@dataclass
class TrackStep:
    """Outcome of advancing the point set by one frame."""
    points: np.ndarray = field(default_factory=empty_points)
    prev_points: np.ndarray = field(default_factory=empty_points)
    lost: int = 0
    ok: bool = True
    reason: str = ""

    @property
    def tracked(self) -> int:
        return len(self.points)

    @property
    def correspondences(self) -> list[Correspondence]:
        return [
            Correspondence(prev=(float(px), float(py)), curr=(float(cx), float(cy)))
            for (px, py), (cx, cy) in zip(self.prev_points, self.points)
        ]


def filter_tracks(
    prev_points: np.ndarray,
    next_points: np.ndarray,
    status: np.ndarray,
    max_displacement: float,
) -> np.ndarray:
    """
    Compute the mask of correspondences worth keeping.

    A point is kept when the flow reported it found, both positions are
    finite, and it moved strictly less than ``max_displacement`` pixels.

    Args:
        prev_points: N x 2 positions in the previous frame
        next_points: N x 2 positions in the current frame
        status: N flow status flags
        max_displacement: Outlier bound in pixels

    Returns:
        Boolean mask of length N
    """
    prev_points = prev_points.reshape(-1, 2)
    next_points = next_points.reshape(-1, 2)
    valid = np.asarray(status, dtype=bool).ravel()

    finite = np.isfinite(prev_points).all(axis=1) & np.isfinite(next_points).all(axis=1)
    valid = valid & finite

    with np.errstate(invalid="ignore"):
        distance = np.linalg.norm(next_points - prev_points, axis=1)
        valid = valid & (distance < max_displacement)

    return valid


class MotionTracker:
    """
    Tracks a point set from the previous grayscale frame into the current one.

    Example:
        >>> tracker = MotionTracker(TrackerSettings())
        >>> step = tracker.track(primitives, prev_gray, gray, points)
        >>> print(f"{step.tracked} tracked, {step.lost} lost")
    """

    def __init__(self, settings: TrackerSettings):
        self.settings = settings

    def track(
        self,
        primitives: Primitives,
        prev_gray: np.ndarray | None,
        gray: np.ndarray,
        points: np.ndarray,
    ) -> TrackStep:
        """
        Advance ``points`` from ``prev_gray`` to ``gray``.

        Skipped (empty step) when there is no previous frame or no points.
        A failing flow computation is logged and also yields an empty step.

        Returns:
            TrackStep with the surviving points and their previous positions
        """
        if prev_gray is None or points is None or len(points) == 0:
            return TrackStep()

        s = self.settings
        points = np.asarray(points, dtype=np.float32).reshape(-1, 2)

        try:
            outcome = primitives.track_flow(
                prev_gray, gray, points,
                s.win_size, s.max_level, s.flow_max_iter, s.flow_epsilon,
            )
        except Exception as e:
            logger.exception("Optical flow raised")
            outcome = Outcome.failure(str(e))

        if not outcome.ok:
            logger.error("Tracking failed: %s", outcome.reason)
            return TrackStep(lost=len(points), ok=False, reason=outcome.reason)

        next_points, status = outcome.value
        next_points = np.asarray(next_points, dtype=np.float32).reshape(-1, 2)
        if len(next_points) != len(points):
            reason = f"flow returned {len(next_points)} points for {len(points)}"
            logger.error("Tracking failed: %s", reason)
            return TrackStep(lost=len(points), ok=False, reason=reason)

        valid = filter_tracks(points, next_points, status, s.max_displacement)

        return TrackStep(
            points=np.ascontiguousarray(next_points[valid]),
            prev_points=np.ascontiguousarray(points[valid]),
            lost=int(np.count_nonzero(~valid)),
        )
