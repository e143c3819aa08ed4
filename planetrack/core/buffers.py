"""
Frame buffers owned by a TrackingEngine.

Holds the current and previous grayscale frames for one capture size.
Buffers are replaced, never mutated in place, and are dropped as a unit
when the capture size changes or the owner is torn down.
"""

import logging

import numpy as np


logger = logging.getLogger(__name__)


class FrameBuffers:
    """
    Current/previous grayscale frame pair sized to the capture device.

    Example:
        with FrameBuffers() as buffers:
            buffers.ensure(640, 480)
            buffers.current = gray
            buffers.advance()
    """

    def __init__(self):
        self.width = 0
        self.height = 0
        self.current: np.ndarray | None = None
        self.previous: np.ndarray | None = None

    @property
    def allocated(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def has_previous(self) -> bool:
        return self.previous is not None

    def ensure(self, width: int, height: int) -> bool:
        """
        Make sure buffers match the given capture size.

        Returns:
            True if the buffers were (re)allocated
        """
        if width == self.width and height == self.height:
            return False

        if self.allocated:
            logger.info(
                "Capture size changed %dx%d -> %dx%d, reallocating buffers",
                self.width, self.height, width, height,
            )
        else:
            logger.info("Allocating frame buffers: %dx%d", width, height)

        self.release()
        self.width = width
        self.height = height
        return True

    def advance(self) -> None:
        """Make the current frame the previous one for the next call."""
        self.previous = self.current
        self.current = None

    def clear_previous(self) -> None:
        self.previous = None

    def release(self) -> None:
        """Drop both frames and forget the capture size."""
        self.current = None
        self.previous = None
        self.width = 0
        self.height = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False
