"""
Video output handlers.

- OverlayVideoOutput: input frames with the diagnostics overlay composited
"""

import logging

import cv2
import numpy as np

from planetrack.outputs.base import BaseOutput, OutputSpec
from planetrack.tracking.overlay import composite


logger = logging.getLogger(__name__)


class OverlayVideoOutput(BaseOutput):
    """
    Writes the input video with the diagnostics overlay drawn on top.

    Options:
        filename: Output filename (default: input_overlay.mp4)
        fps: Override output frame rate (default: input frame rate)
    """

    def __init__(self, spec: OutputSpec, input_path: str):
        super().__init__(spec, input_path)
        self.writer: cv2.VideoWriter | None = None
        self.fps = spec.get_float('fps', 0.0)

    def _get_default_suffix(self) -> str:
        return "_overlay"

    def _get_default_extension(self) -> str:
        return "mp4"

    def initialize(self, video_props: dict) -> None:
        fps = self.fps or video_props.get('fps') or 30.0
        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        self.writer = cv2.VideoWriter(
            str(self.output_path),
            fourcc,
            fps,
            (video_props['width'], video_props['height']),
        )
        logger.info("Writing overlay video to %s", self.output_path)

    def process_frame(
        self,
        frame_num: int,
        frame: np.ndarray,
        tracking_data: dict,
    ) -> None:
        if self.writer is None:
            return

        overlay = tracking_data.get('overlay')
        if overlay is None or overlay.shape[:2] != frame.shape[:2]:
            vis = frame
        else:
            vis = composite(frame, overlay)
        self.writer.write(vis)

    def finalize(self) -> None:
        if self.writer:
            self.writer.release()
            self.writer = None
