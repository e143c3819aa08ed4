"""
Video input for offline runs of the tracking engine.

Wraps cv2.VideoCapture with a 1-indexed frame range so recorded clips
can be replayed through TrackingEngine the same way live frames are.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import cv2
import numpy as np


@dataclass
class VideoProperties:
    """Properties of a video file."""
    width: int
    height: int
    fps: float
    frame_count: int

    @classmethod
    def from_capture(cls, cap: cv2.VideoCapture) -> "VideoProperties":
        """Create VideoProperties from an OpenCV VideoCapture."""
        return cls(
            width=int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            fps=cap.get(cv2.CAP_PROP_FPS),
            frame_count=int(cap.get(cv2.CAP_PROP_FRAME_COUNT)),
        )

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "fps": self.fps,
            "frame_count": self.frame_count,
        }


class VideoReader:
    """
    Video reader with frame range support.

    Example:
        with VideoReader("walk.mp4", first_frame=10) as reader:
            for frame_num, frame in reader:
                result = engine.process_frame(frame)
    """

    def __init__(
        self,
        path: str | Path,
        first_frame: int = 1,
        last_frame: int | None = None,
    ):
        """
        Args:
            path: Path to video file
            first_frame: First frame to read (1-indexed)
            last_frame: Last frame to read (None = end of video)
        """
        self.path = Path(path)
        self.first_frame = first_frame
        self.last_frame = last_frame

        self._cap: cv2.VideoCapture | None = None
        self._props: VideoProperties | None = None

    def open(self) -> "VideoReader":
        """Open the video file."""
        if not self.path.exists():
            raise FileNotFoundError(f"Video file not found: {self.path}")

        self._cap = cv2.VideoCapture(str(self.path))
        if not self._cap.isOpened():
            raise RuntimeError(f"Failed to open video: {self.path}")

        self._props = VideoProperties.from_capture(self._cap)

        # Frame count is 0 for some containers; read until exhausted then
        if self.last_frame is None or (
            self._props.frame_count > 0 and self.last_frame > self._props.frame_count
        ):
            self.last_frame = self._props.frame_count or None

        self._cap.set(cv2.CAP_PROP_POS_FRAMES, self.first_frame - 1)
        return self

    def close(self) -> None:
        if self._cap:
            self._cap.release()
            self._cap = None

    @property
    def properties(self) -> VideoProperties:
        if self._props is None:
            raise RuntimeError("Video not opened. Call open() first.")
        return self._props

    def read_frame(self) -> tuple[bool, np.ndarray | None]:
        """Read the next frame."""
        if self._cap is None:
            raise RuntimeError("Video not opened. Call open() first.")
        ret, frame = self._cap.read()
        return ret, frame if ret else None

    def __iter__(self) -> Iterator[tuple[int, np.ndarray]]:
        """Iterate over (frame_num, BGR frame) in the range."""
        if self._cap is None:
            self.open()

        current_frame = self.first_frame
        while self.last_frame is None or current_frame <= self.last_frame:
            ret, frame = self.read_frame()
            if not ret:
                break
            yield current_frame, frame
            current_frame += 1

    def __enter__(self) -> "VideoReader":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
