"""
Vision primitives backed by OpenCV.

The tracking components never call cv2 directly for detection or flow;
they go through VisionPrimitives so failures come back as Outcome values
and tests can substitute a scripted implementation.
"""

import importlib
import logging
from types import ModuleType
from typing import Protocol, runtime_checkable

import numpy as np

from planetrack.core.errors import InitializationError, InvalidFrameError
from planetrack.core.types import Outcome, empty_points


logger = logging.getLogger(__name__)


@runtime_checkable
class Primitives(Protocol):
    """Protocol for the grayscale / corner / optical-flow collaborator."""

    def to_gray(self, frame: np.ndarray) -> np.ndarray:
        ...

    def detect_corners(
        self,
        gray: np.ndarray,
        max_corners: int,
        quality_level: float,
        min_distance: float,
        block_size: int,
    ) -> Outcome[np.ndarray]:
        ...

    def track_flow(
        self,
        prev_gray: np.ndarray,
        gray: np.ndarray,
        points: np.ndarray,
        win_size: int,
        max_level: int,
        max_iter: int,
        epsilon: float,
    ) -> Outcome[tuple[np.ndarray, np.ndarray]]:
        ...


class VisionPrimitives:
    """
    OpenCV implementation of the Primitives protocol.

    Points go in and come out as N x 2 float32 arrays; the N x 1 x 2
    layout OpenCV wants is handled here.
    """

    def __init__(self, cv: ModuleType):
        self.cv = cv

    def to_gray(self, frame: np.ndarray) -> np.ndarray:
        """
        Convert a frame to single-channel 8-bit grayscale.

        Accepts RGBA (4 channels), BGR (3 channels) or an already-gray
        2-D array.

        Raises:
            InvalidFrameError: If the frame is empty or has another layout
        """
        if frame is None or frame.size == 0:
            raise InvalidFrameError("Empty frame")

        if frame.ndim == 2:
            return frame.copy()
        if frame.ndim == 3 and frame.shape[2] == 4:
            code = self.cv.COLOR_RGBA2GRAY
        elif frame.ndim == 3 and frame.shape[2] == 3:
            code = self.cv.COLOR_BGR2GRAY
        else:
            raise InvalidFrameError(f"Unsupported frame shape: {frame.shape}")

        try:
            return self.cv.cvtColor(frame, code)
        except self.cv.error as e:
            raise InvalidFrameError(
                f"Cannot convert {frame.dtype} frame to grayscale: {e}"
            ) from e

    def detect_corners(
        self,
        gray: np.ndarray,
        max_corners: int,
        quality_level: float,
        min_distance: float,
        block_size: int,
    ) -> Outcome[np.ndarray]:
        """Detect Shi-Tomasi corners on a grayscale frame."""
        try:
            corners = self.cv.goodFeaturesToTrack(
                gray,
                maxCorners=max_corners,
                qualityLevel=quality_level,
                minDistance=min_distance,
                mask=None,
                blockSize=block_size,
                useHarrisDetector=False,
                k=0.04,
            )
        except self.cv.error as e:
            return Outcome.failure(f"corner detection failed: {e}")

        if corners is None:
            return Outcome.success(empty_points())
        return Outcome.success(corners.reshape(-1, 2).astype(np.float32))

    def track_flow(
        self,
        prev_gray: np.ndarray,
        gray: np.ndarray,
        points: np.ndarray,
        win_size: int,
        max_level: int,
        max_iter: int,
        epsilon: float,
    ) -> Outcome[tuple[np.ndarray, np.ndarray]]:
        """
        Track points from ``prev_gray`` into ``gray`` with pyramidal LK.

        Returns:
            Outcome wrapping (next_points N x 2, status N bool)
        """
        if prev_gray.shape != gray.shape:
            return Outcome.failure(
                f"frame size changed: {prev_gray.shape} -> {gray.shape}"
            )

        criteria = (
            self.cv.TERM_CRITERIA_EPS | self.cv.TERM_CRITERIA_COUNT,
            max_iter,
            epsilon,
        )
        prev_pts = np.ascontiguousarray(points, dtype=np.float32).reshape(-1, 1, 2)

        try:
            next_pts, status, _ = self.cv.calcOpticalFlowPyrLK(
                prev_gray,
                gray,
                prev_pts,
                None,
                winSize=(win_size, win_size),
                maxLevel=max_level,
                criteria=criteria,
            )
        except self.cv.error as e:
            return Outcome.failure(f"optical flow failed: {e}")

        if next_pts is None or status is None:
            return Outcome.failure("optical flow returned no points")

        return Outcome.success(
            (next_pts.reshape(-1, 2), status.ravel() == 1)
        )


def load_primitives(module_name: str = "cv2") -> VisionPrimitives:
    """
    Import the vision library and wrap it.

    Raises:
        InitializationError: If the library cannot be imported
    """
    try:
        cv = importlib.import_module(module_name)
    except ImportError as e:
        raise InitializationError(
            f"Vision primitives library '{module_name}' is not available: {e}"
        ) from e

    logger.info("Loaded vision primitives from %s %s",
                module_name, getattr(cv, "__version__", "unknown"))
    return VisionPrimitives(cv)
