"""
Output manager: fans each processed frame out to the requested outputs.
"""

from pathlib import Path

import numpy as np

from planetrack.outputs.base import BaseOutput, OutputSpec
from planetrack.outputs.video import OverlayVideoOutput
from planetrack.outputs.data import PoseCSVOutput


OUTPUT_TYPES: dict[str, type[BaseOutput]] = {
    'overlay': OverlayVideoOutput,
    'poses': PoseCSVOutput,
}


class OutputManager:
    """
    Holds the outputs of one tracking run.

    ``tracking_data`` handed to process_frame() is forwarded unchanged to
    every output; see BaseOutput for its keys. Used as a context manager
    it finalizes every output on exit, including on errors.

    Example:
        >>> manager = OutputManager("walk.mp4")
        >>> manager.add_output("overlay")
        >>> manager.add_output("poses=trackingonly=true")
        >>> with manager:
        ...     manager.initialize_all(video_props)
        ...     for frame_num, frame in video:
        ...         manager.process_frame(frame_num, frame, tracking_data)
    """

    def __init__(self, input_path: str):
        self.input_path = input_path
        self.outputs: list[BaseOutput] = []

    def add_output(self, spec_string: str) -> BaseOutput:
        """
        Create an output from a spec string such as ``poses=filename=x.csv``.

        Raises:
            ValueError: If the spec is malformed or names an unknown type
        """
        spec = OutputSpec(spec_string)
        output_class = OUTPUT_TYPES.get(spec.output_type)
        if output_class is None:
            raise ValueError(
                f"Unknown output type {spec.output_type!r}; "
                f"expected one of {sorted(OUTPUT_TYPES)}"
            )

        output = output_class(spec, self.input_path)
        self.outputs.append(output)
        return output

    def initialize_all(self, video_props: dict) -> None:
        for output in self.outputs:
            output.initialize(video_props)

    def process_frame(
        self,
        frame_num: int,
        frame: np.ndarray,
        tracking_data: dict,
    ) -> None:
        for output in self.outputs:
            output.process_frame(frame_num, frame, tracking_data)

    def finalize_all(self) -> None:
        for output in self.outputs:
            output.finalize()

    def get_output_paths(self) -> list[Path]:
        return [output.get_output_path() for output in self.outputs]

    def __len__(self) -> int:
        return len(self.outputs)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finalize_all()
        return False


def parse_output_specs(specs: list[str], input_path: str) -> OutputManager:
    """
    Build an OutputManager from command line spec strings.

    Raises:
        ValueError: If any spec is malformed or names an unknown type
    """
    manager = OutputManager(input_path)
    for spec in specs:
        manager.add_output(spec)
    return manager
