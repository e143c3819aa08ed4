"""
Frame-synchronous markerless tracking engine.

TrackingEngine owns all tracking state: frame buffers, the tracked point
set, plane confidence and the last pose. Each process_frame() call runs
refresh -> track -> plane -> pose -> overlay and returns a FrameResult.

Orientation samples may be written from another thread through
update_orientation(). The sample is an immutable object replaced by a
single reference assignment, so a reader always sees one whole sample
and the last write wins without any locking.
"""

import logging
import time

import numpy as np

from planetrack.core.buffers import FrameBuffers
from planetrack.core.config import TrackerSettings
from planetrack.core.errors import EngineStateError, InvalidFrameError
from planetrack.core.primitives import Primitives, load_primitives
from planetrack.core.types import (
    Correspondence,
    FrameResult,
    OrientationSample,
    PlaneHypothesis,
    PoseEstimate,
    empty_points,
)
from planetrack.tracking.features import FeatureSetManager
from planetrack.tracking.overlay import DiagnosticsOverlay
from planetrack.tracking.plane import PlaneEstimator
from planetrack.tracking.pose import PoseEstimator
from planetrack.tracking.tracker import MotionTracker


logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL = 2.0


class TrackingEngine:
    """
    Decides per frame whether a planar surface is in view and where.

    Example:
        >>> with TrackingEngine() as engine:
        ...     engine.initialize()
        ...     for frame in frames:
        ...         result = engine.process_frame(frame)
        ...         if result.is_tracking:
        ...             place_content(result.pose)
    """

    def __init__(
        self,
        settings: TrackerSettings | None = None,
        primitives: Primitives | None = None,
        overlay: DiagnosticsOverlay | None = None,
    ):
        """
        Args:
            settings: Tunables; defaults to TrackerSettings()
            primitives: Vision primitives; loaded from OpenCV on initialize()
            overlay: Diagnostics renderer; one is created from settings if omitted
        """
        self.settings = settings or TrackerSettings()
        self.settings.validate()

        self._primitives = primitives
        self._features = FeatureSetManager(self.settings)
        self._tracker = MotionTracker(self.settings)
        self._plane = PlaneEstimator(self.settings)
        self._pose_estimator = PoseEstimator(self.settings)
        self._overlay = overlay or DiagnosticsOverlay(self.settings.plane_draw_threshold)
        self._buffers = FrameBuffers()

        self._orientation = OrientationSample()
        self._points = empty_points()
        self._correspondences: list[Correspondence] = []
        self._pose: PoseEstimate | None = None
        self._last_overlay: np.ndarray | None = None
        self._frame_count = 0
        self._is_tracking = False

        self._initialized = False
        self._disposed = False
        self.debug_visible = True
        self._last_log_time = 0.0

    def initialize(self) -> "TrackingEngine":
        """
        Load the vision primitives and prepare buffers.

        Calling it again on an initialized engine is a no-op.

        Raises:
            InitializationError: If the vision library is unavailable
        """
        if self._initialized:
            return self

        logger.info("Initializing tracking engine")
        if self._primitives is None:
            self._primitives = load_primitives()

        self._buffers.release()
        self._disposed = False
        self._initialized = True
        logger.info("Tracking engine initialized")
        return self

    def reset(self) -> None:
        """Clear tracking state, keeping settings and buffer allocation."""
        logger.info("Resetting tracking engine")
        self._points = empty_points()
        self._correspondences = []
        self._plane.reset()
        self._pose = None
        self._last_overlay = None
        self._frame_count = 0
        self._is_tracking = False
        self._buffers.clear_previous()

    def dispose(self) -> None:
        """Release all buffers; initialize() is required before further use."""
        if self._disposed:
            return
        self.reset()
        self._buffers.release()
        self._initialized = False
        self._disposed = True
        logger.info("Tracking engine disposed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False

    def update_orientation(
        self,
        alpha: float | None = None,
        beta: float | None = None,
        gamma: float | None = None,
    ) -> None:
        """Record the latest orientation sensor reading, in degrees."""
        self._orientation = OrientationSample(
            alpha=float(alpha or 0.0),
            beta=float(beta or 0.0),
            gamma=float(gamma or 0.0),
        )

    def update_settings(self, **overrides) -> TrackerSettings:
        """Apply a partial settings update to the engine and its components."""
        self.settings = self.settings.updated(**overrides)
        for component in (self._features, self._tracker, self._plane, self._pose_estimator):
            component.settings = self.settings
        self._overlay.draw_threshold = self.settings.plane_draw_threshold
        return self.settings

    def set_debug_visible(self, visible: bool) -> None:
        self.debug_visible = visible

    def process_frame(self, frame: np.ndarray) -> FrameResult:
        """
        Run one frame through the tracking pipeline.

        Args:
            frame: H x W x 4 RGBA frame (H x W x 3 BGR and H x W gray
                are accepted too)

        Returns:
            FrameResult for this frame. ``pose`` is set only when
            ``is_tracking`` is True.

        Raises:
            EngineStateError: If the engine has been disposed
        """
        if self._disposed:
            raise EngineStateError("Engine has been disposed; call initialize() first")

        result = FrameResult(orientation=self._orientation)

        if not self._initialized:
            logger.warning("Tracking engine not initialized")
            return result

        height, width = _frame_size(frame)
        if width == 0 or height == 0:
            logger.warning("Invalid frame dimensions: %dx%d", width, height)
            return result

        try:
            gray = self._primitives.to_gray(frame)
        except InvalidFrameError as e:
            logger.warning("Skipping frame: %s", e)
            return result

        self._log_heartbeat(width, height)

        if self._buffers.ensure(width, height):
            # Points from another capture size are meaningless here
            self._points = empty_points()
            self._correspondences = []
        self._buffers.current = gray
        self._frame_count += 1

        refreshed = False
        if self._features.needs_refresh(len(self._points), self._frame_count):
            self._points = self._features.detect(self._primitives, gray)
            self._correspondences = []
            refreshed = True

        if refreshed or not self._buffers.has_previous or len(self._points) == 0:
            # Fresh points have no previous positions yet
            self._correspondences = []
            result.feature_count = len(self._points)
        else:
            step = self._tracker.track(
                self._primitives, self._buffers.previous, gray, self._points
            )
            self._points = step.points
            self._correspondences = step.correspondences

            result.feature_count = step.tracked
            result.has_features = step.tracked >= self.settings.min_features

            plane_found = self._plane.update(self._correspondences, self._points)
            result.plane_count = 1 if plane_found else 0

            if plane_found:
                self._pose = self._pose_estimator.estimate(
                    self._plane.hypothesis, self._orientation
                )
                result.is_tracking = True
                result.pose = self._pose

        self._is_tracking = result.is_tracking
        self._last_overlay = self._overlay.render(
            width, height,
            self._frame_count,
            self._points,
            self._correspondences,
            self._plane.hypothesis,
            self._plane.confidence,
            result,
        )

        self._buffers.advance()
        return result

    def _log_heartbeat(self, width: int, height: int) -> None:
        now = time.monotonic()
        if now - self._last_log_time > HEARTBEAT_INTERVAL:
            logger.debug(
                "Processing frame %d, input %dx%d", self._frame_count, width, height
            )
            self._last_log_time = now

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def is_tracking(self) -> bool:
        return self._is_tracking

    @property
    def confidence(self) -> float:
        return self._plane.confidence

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def plane(self) -> PlaneHypothesis | None:
        return self._plane.hypothesis

    @property
    def current_pose(self) -> PoseEstimate | None:
        """Last computed pose; may be stale when not tracking."""
        return self._pose

    @property
    def orientation(self) -> OrientationSample:
        return self._orientation

    @property
    def points(self) -> np.ndarray:
        return self._points.copy()

    @property
    def correspondences(self) -> list[Correspondence]:
        return list(self._correspondences)

    @property
    def last_overlay(self) -> np.ndarray | None:
        return self._last_overlay


def _frame_size(frame: np.ndarray | None) -> tuple[int, int]:
    """(height, width) of a frame, zeros for missing or malformed input."""
    shape = getattr(frame, "shape", ())
    if len(shape) < 2:
        return 0, 0
    return int(shape[0]), int(shape[1])
