"""
Tests for the tracking pipeline components.
"""

import math

import numpy as np
import pytest

from conftest import FakePrimitives, grid_points, shifted


class TestFeatureSetManager:
    """Tests for the refresh policy and re-detection."""

    @pytest.mark.parametrize("point_count,frame_count,expected", [
        (0, 1, True),
        (14, 7, True),
        (15, 7, False),
        (200, 14, False),
        (200, 15, True),
        (200, 30, True),
        (15, 16, False),
    ])
    def test_needs_refresh(self, settings, point_count, frame_count, expected):
        from planetrack.tracking import FeatureSetManager

        manager = FeatureSetManager(settings)
        assert manager.needs_refresh(point_count, frame_count) is expected

    def test_detect_returns_points(self, settings):
        from planetrack.tracking import FeatureSetManager

        prims = FakePrimitives()
        points = FeatureSetManager(settings).detect(prims, np.zeros((10, 10), np.uint8))
        assert points.shape == (20, 2)
        assert prims.detect_calls == 1

    def test_detect_failure_is_empty(self, settings):
        """Test that a failed detection yields an empty point set."""
        from planetrack.tracking import FeatureSetManager

        prims = FakePrimitives(fail_detect=True)
        points = FeatureSetManager(settings).detect(prims, np.zeros((10, 10), np.uint8))
        assert points.shape == (0, 2)


class TestFilterTracks:
    """Tests for correspondence filtering."""

    def test_outlier_excluded(self):
        from planetrack.tracking import filter_tracks

        prev = np.array([[0, 0], [0, 0], [0, 0]], dtype=np.float32)
        nxt = np.array([[3, 4], [30, 40], [60, 0]], dtype=np.float32)
        status = np.array([1, 1, 1])

        mask = filter_tracks(prev, nxt, status, 50.0)
        # 5 px kept; exactly 50 px and 60 px dropped
        assert mask.tolist() == [True, False, False]

    def test_status_and_nan_excluded(self):
        from planetrack.tracking import filter_tracks

        prev = np.array([[0, 0], [0, 0], [np.nan, 0], [0, 0]], dtype=np.float32)
        nxt = np.array([[1, 1], [1, 1], [1, 1], [np.inf, 1]], dtype=np.float32)
        status = np.array([1, 0, 1, 1])

        mask = filter_tracks(prev, nxt, status, 50.0)
        assert mask.tolist() == [True, False, False, False]


class TestMotionTracker:
    """Tests for MotionTracker."""

    def test_skips_without_previous_frame(self, settings):
        from planetrack.tracking import MotionTracker

        prims = FakePrimitives()
        step = MotionTracker(settings).track(
            prims, None, np.zeros((10, 10), np.uint8), grid_points()
        )
        assert step.tracked == 0
        assert step.correspondences == []
        assert prims.flow_calls == 0

    def test_skips_without_points(self, settings):
        from planetrack.tracking import MotionTracker
        from planetrack.core.types import empty_points

        prims = FakePrimitives()
        gray = np.zeros((10, 10), np.uint8)
        step = MotionTracker(settings).track(prims, gray, gray, empty_points())
        assert step.tracked == 0
        assert prims.flow_calls == 0

    def test_track_drops_outlier(self, settings):
        """Test an outlier is excluded from points and correspondences."""
        from planetrack.tracking import MotionTracker

        points = grid_points(10)
        jitter = np.zeros((10, 2), dtype=np.float32)
        jitter[3] = (80.0, 0.0)
        prims = FakePrimitives(shift=(2.0, 1.0), jitter=jitter)
        gray = np.zeros((10, 10), np.uint8)

        step = MotionTracker(settings).track(prims, gray, gray, points)

        assert step.tracked == 9
        assert step.lost == 1
        assert len(step.correspondences) == 9
        outlier = tuple(points[3] + (82.0, 1.0))
        assert not any(np.allclose(p, outlier) for p in step.points)
        assert all(c.curr != outlier for c in step.correspondences)
        c = step.correspondences[0]
        assert (c.dx, c.dy) == pytest.approx((2.0, 1.0))

    def test_flow_exception_is_empty_step(self, settings):
        """Test that a raising flow primitive yields zero correspondences."""
        from planetrack.tracking import MotionTracker

        prims = FakePrimitives(fail_flow=True)
        gray = np.zeros((10, 10), np.uint8)
        step = MotionTracker(settings).track(prims, gray, gray, grid_points())

        assert not step.ok
        assert step.tracked == 0
        assert step.correspondences == []
        assert "flow exploded" in step.reason


class TestMotionStatistics:
    """Tests for motion coherence statistics."""

    def test_uniform_motion(self):
        from planetrack.tracking import motion_statistics

        stats = motion_statistics(shifted(grid_points(), 3.0, -2.0))
        assert stats.mean_dx == pytest.approx(3.0)
        assert stats.mean_dy == pytest.approx(-2.0)
        assert stats.variance == pytest.approx(0.0)

    def test_population_variance(self):
        from planetrack.core.types import Correspondence
        from planetrack.tracking import motion_statistics

        corr = [
            Correspondence((0, 0), (10, 0)),
            Correspondence((0, 0), (-10, 0)),
            Correspondence((0, 0), (0, 10)),
            Correspondence((0, 0), (0, -10)),
        ]
        stats = motion_statistics(corr)
        assert (stats.mean_dx, stats.mean_dy) == pytest.approx((0.0, 0.0))
        assert stats.variance == pytest.approx(100.0)


def _incoherent(count: int = 20):
    """Correspondences moving alternately left and right by 20 px."""
    from planetrack.core.types import Correspondence

    points = grid_points(count)
    return [
        Correspondence((float(x), float(y)), (float(x + (20 if i % 2 else -20)), float(y)))
        for i, (x, y) in enumerate(points)
    ]


class TestPlaneEstimator:
    """Tests for PlaneEstimator confidence and hypothesis."""

    def test_too_few_correspondences(self, settings):
        from planetrack.tracking import PlaneEstimator

        estimator = PlaneEstimator(settings)
        estimator.confidence = 0.4
        points = grid_points(7)

        assert estimator.update(shifted(points, 1, 0), points + 1) is False
        assert estimator.confidence == pytest.approx(0.3)
        assert estimator.hypothesis is None

    def test_coherent_increases_and_sets_center(self, settings):
        """Scenario: 20 coherent correspondences, 0.4 -> 0.55, accepted."""
        from planetrack.tracking import PlaneEstimator

        estimator = PlaneEstimator(settings)
        estimator.confidence = 0.4
        points = grid_points(20)
        current = points + np.array([2.0, 1.0], dtype=np.float32)

        assert estimator.update(shifted(points, 2.0, 1.0), current) is True
        assert estimator.confidence == pytest.approx(0.55)

        plane = estimator.hypothesis
        assert plane.center == pytest.approx(tuple(current.mean(axis=0)))
        assert plane.motion == pytest.approx((2.0, 1.0))
        assert plane.confidence == pytest.approx(0.55)

    def test_incoherent_decreases_and_keeps_hypothesis(self, settings):
        """Scenario: high variance, 0.6 -> 0.5, not trackable."""
        from planetrack.tracking import PlaneEstimator

        estimator = PlaneEstimator(settings)
        points = grid_points(20)
        estimator.update(shifted(points, 1.0, 0.0), points + 1)
        previous = estimator.hypothesis
        estimator.confidence = 0.6

        assert estimator.update(_incoherent(), points) is False
        assert estimator.confidence == pytest.approx(0.5)
        assert estimator.hypothesis is previous

    def test_acceptance_is_strict(self, settings):
        """Confidence exactly at the acceptance threshold is not accepted."""
        from planetrack.tracking import PlaneEstimator

        estimator = PlaneEstimator(settings.updated(confidence_step_up=0.25))
        estimator.confidence = 0.25
        points = grid_points(20)

        assert estimator.update(shifted(points, 1, 0), points) is False
        assert estimator.confidence == 0.5

    def test_confidence_bounded(self, settings):
        from planetrack.tracking import PlaneEstimator

        estimator = PlaneEstimator(settings)
        points = grid_points(20)
        for _ in range(20):
            estimator.update(shifted(points, 1, 0), points)
            assert 0.0 <= estimator.confidence <= 1.0
        assert estimator.confidence == 1.0

        for _ in range(20):
            estimator.update([], points)
            assert 0.0 <= estimator.confidence <= 1.0
        assert estimator.confidence == 0.0

    def test_insufficient_data_never_increases(self, settings):
        from planetrack.tracking import PlaneEstimator

        estimator = PlaneEstimator(settings)
        for start in (0.0, 0.05, 0.5, 1.0):
            estimator.confidence = start
            estimator.update(shifted(grid_points(5), 0, 0), grid_points(5))
            assert estimator.confidence <= start

    def test_reset(self, settings):
        from planetrack.tracking import PlaneEstimator

        estimator = PlaneEstimator(settings)
        points = grid_points(20)
        estimator.update(shifted(points, 1, 0), points)
        estimator.reset()
        assert estimator.confidence == 0.0
        assert estimator.hypothesis is None


class TestPoseEstimator:
    """Tests for PoseEstimator."""

    def test_pose_mapping(self, settings):
        from planetrack.core.types import OrientationSample, PlaneHypothesis
        from planetrack.tracking import PoseEstimator

        plane = PlaneHypothesis(center=(160.0, 120.0), confidence=0.7, motion=(10.0, -4.0))
        orientation = OrientationSample(alpha=90.0, beta=45.0, gamma=-30.0)

        pose = PoseEstimator(settings).estimate(plane, orientation)

        assert pose.position == pytest.approx((-0.01, -0.004, 3.0))
        assert pose.rotation == pytest.approx((math.pi / 4, -math.pi / 6, math.pi / 2))
        assert pose.plane_center == (160.0, 120.0)
        assert pose.confidence == 0.7

    def test_configurable_scale_and_depth(self, settings):
        from planetrack.core.types import OrientationSample, PlaneHypothesis
        from planetrack.tracking import PoseEstimator

        plane = PlaneHypothesis(center=(0.0, 0.0), confidence=1.0, motion=(1.0, 1.0))
        pose = PoseEstimator(settings.updated(motion_scale=0.5, standoff_depth=1.5)).estimate(
            plane, OrientationSample()
        )
        assert pose.position == pytest.approx((-0.5, 0.5, 1.5))
        assert pose.rotation == (0.0, 0.0, 0.0)


class TestDiagnosticsOverlay:
    """Tests for the diagnostics overlay."""

    def _render(self, plane=None, confidence=0.0, points=None, correspondences=()):
        from planetrack.core.types import FrameResult
        from planetrack.tracking import DiagnosticsOverlay

        points = np.empty((0, 2), np.float32) if points is None else points
        return DiagnosticsOverlay(0.3).render(
            320, 240, 7, points, list(correspondences), plane, confidence, FrameResult()
        )

    def test_shape_and_transparent_background(self):
        canvas = self._render()
        assert canvas.shape == (240, 320, 4)
        assert canvas.dtype == np.uint8
        assert canvas[200, 300, 3] == 0

    def test_feature_marker(self):
        canvas = self._render(points=np.array([[50.0, 200.0]], np.float32))
        assert tuple(canvas[200, 50]) == (0, 255, 0, 255)

    def test_plane_drawn_above_threshold(self):
        from planetrack.core.types import PlaneHypothesis

        plane = PlaneHypothesis(center=(250.0, 180.0), confidence=0.8, motion=(0.0, 0.0))
        canvas = self._render(plane=plane, confidence=0.8)
        b, g, r, a = canvas[180, 250]
        assert a == pytest.approx(0.8 * 255, abs=2)
        assert (b, g, r) == (255, 255, 0)
        # ring at radius 40
        assert canvas[180, 290, 3] == 255

    def test_plane_hidden_below_threshold(self):
        from planetrack.core.types import PlaneHypothesis

        plane = PlaneHypothesis(center=(250.0, 180.0), confidence=0.2, motion=(0.0, 0.0))
        canvas = self._render(plane=plane, confidence=0.2)
        assert canvas[180, 250, 3] == 0
        assert canvas[180, 290, 3] == 0

    def test_status_lines(self):
        from planetrack.core.types import FrameResult
        from planetrack.tracking import status_lines

        lines = status_lines(12, 30, 28, 0.55, FrameResult(is_tracking=True, has_features=True))
        assert lines == [
            "Frame: 12",
            "Features: 30",
            "Tracked: 28",
            "Confidence: 55%",
            "Status: TRACKING",
        ]
        assert status_lines(1, 0, 0, 0.0, FrameResult())[-1] == "Status: NO FEATURES"
        assert status_lines(1, 20, 20, 0.1, FrameResult(has_features=True))[-1] == "Status: SEARCHING"

    def test_composite(self):
        from planetrack.tracking import composite

        frame = np.full((240, 320, 3), 40, dtype=np.uint8)
        overlay = np.zeros((240, 320, 4), dtype=np.uint8)
        overlay[10, 10] = (0, 0, 255, 255)

        out = composite(frame, overlay)
        assert out.shape == (240, 320, 3)
        assert tuple(out[10, 10]) == (0, 0, 255)
        assert tuple(out[100, 100]) == (40, 40, 40)
