"""
Shared fixtures for planetrack tests.
"""

import numpy as np
import pytest

from planetrack.core.config import TrackerSettings
from planetrack.core.types import Correspondence, Outcome


def grid_points(count: int = 20, spacing: float = 20.0, origin=(40.0, 40.0)) -> np.ndarray:
    """``count`` points laid out on a 5-wide grid."""
    return np.array(
        [(origin[0] + (i % 5) * spacing, origin[1] + (i // 5) * spacing)
         for i in range(count)],
        dtype=np.float32,
    )


def shifted(points: np.ndarray, dx: float, dy: float) -> list[Correspondence]:
    """Correspondences for every point moved by (dx, dy)."""
    return [
        Correspondence(prev=(float(x), float(y)), curr=(float(x + dx), float(y + dy)))
        for x, y in points
    ]


class FakePrimitives:
    """
    Scripted stand-in for VisionPrimitives.

    Corner detection returns a fixed point set; optical flow moves every
    point by ``shift`` plus optional per-point ``jitter``.
    """

    def __init__(
        self,
        corners: np.ndarray | None = None,
        shift: tuple[float, float] = (1.0, 0.0),
        jitter: np.ndarray | None = None,
        fail_detect: bool = False,
        fail_flow: bool = False,
    ):
        self.corners = grid_points() if corners is None else corners
        self.shift = shift
        self.jitter = jitter
        self.fail_detect = fail_detect
        self.fail_flow = fail_flow
        self.detect_calls = 0
        self.flow_calls = 0

    def to_gray(self, frame: np.ndarray) -> np.ndarray:
        if frame.ndim == 3:
            return frame[:, :, 0].copy()
        return frame.copy()

    def detect_corners(self, gray, max_corners, quality_level, min_distance, block_size):
        self.detect_calls += 1
        if self.fail_detect:
            return Outcome.failure("detector unavailable")
        return Outcome.success(self.corners[:max_corners].copy())

    def track_flow(self, prev_gray, gray, points, win_size, max_level, max_iter, epsilon):
        self.flow_calls += 1
        if self.fail_flow:
            raise RuntimeError("flow exploded")
        next_points = points + np.array(self.shift, dtype=np.float32)
        if self.jitter is not None:
            next_points = next_points + self.jitter[:len(points)]
        status = np.ones(len(points), dtype=bool)
        return Outcome.success((next_points.astype(np.float32), status))


@pytest.fixture
def settings():
    return TrackerSettings()


@pytest.fixture
def fake_primitives():
    return FakePrimitives()


@pytest.fixture
def rgba_frame():
    return np.full((240, 320, 4), 128, dtype=np.uint8)


@pytest.fixture
def engine(fake_primitives):
    from planetrack.tracking import TrackingEngine

    engine = TrackingEngine(primitives=fake_primitives)
    engine.initialize()
    yield engine
    engine.dispose()
