"""
Data output handlers.

- PoseCSVOutput: per-frame tracking result and pose as CSV
"""

import csv
import logging

import numpy as np

from planetrack.core.types import FrameResult
from planetrack.outputs.base import BaseOutput, OutputSpec


logger = logging.getLogger(__name__)


CSV_COLUMNS = [
    'frame', 'tracking', 'has_features', 'feature_count', 'plane_count',
    'confidence',
    'pos_x', 'pos_y', 'pos_z',
    'rot_x', 'rot_y', 'rot_z',
    'center_x', 'center_y',
    'alpha', 'beta', 'gamma',
]


def result_row(frame_num: int, result: FrameResult, confidence: float) -> list:
    """Flatten one FrameResult into a CSV row; pose columns empty when not tracking."""
    pose = result.pose if result.is_tracking else None
    if pose is not None:
        pose_cols = [*pose.position, *pose.rotation, *pose.plane_center]
    else:
        pose_cols = [''] * 8

    o = result.orientation
    return [
        frame_num,
        int(result.is_tracking),
        int(result.has_features),
        result.feature_count,
        result.plane_count,
        f"{confidence:.3f}",
        *pose_cols,
        o.alpha, o.beta, o.gamma,
    ]


class PoseCSVOutput(BaseOutput):
    """
    Outputs per-frame tracking results as a CSV file.

    Options:
        filename: Output filename (default: input_poses.csv)
        trackingonly: Only write frames where a plane is tracked (default: false)
    """

    def __init__(self, spec: OutputSpec, input_path: str):
        super().__init__(spec, input_path)
        self.tracking_only = spec.get_bool('trackingonly', False)
        self.file = None
        self.writer = None
        self.rows_written = 0

    def _get_default_suffix(self) -> str:
        return "_poses"

    def _get_default_extension(self) -> str:
        return "csv"

    def initialize(self, video_props: dict) -> None:
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.writer(self.file)
        self.writer.writerow(CSV_COLUMNS)

    def process_frame(
        self,
        frame_num: int,
        frame: np.ndarray,
        tracking_data: dict,
    ) -> None:
        if self.writer is None:
            return

        result: FrameResult = tracking_data['result']
        if self.tracking_only and not result.is_tracking:
            return

        confidence = tracking_data.get('confidence', 0.0)
        self.writer.writerow(result_row(frame_num, result, confidence))
        self.rows_written += 1

    def finalize(self) -> None:
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None
            logger.info("Wrote %d rows to %s", self.rows_written, self.output_path)
