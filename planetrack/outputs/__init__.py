"""
Output handlers module.

- OverlayVideoOutput: Video with the diagnostics overlay
- PoseCSVOutput: Per-frame results and poses as CSV

Example:
    >>> from planetrack.outputs import OutputManager
    >>> manager = OutputManager("walk.mp4")
    >>> manager.add_output("overlay=filename=debug.mp4")
    >>> manager.add_output("poses")
"""

from planetrack.outputs.base import OutputSpec, BaseOutput
from planetrack.outputs.video import OverlayVideoOutput
from planetrack.outputs.data import PoseCSVOutput, result_row
from planetrack.outputs.manager import OutputManager, parse_output_specs

__all__ = [
    "OutputSpec",
    "BaseOutput",
    "OverlayVideoOutput",
    "PoseCSVOutput",
    "result_row",
    "OutputManager",
    "parse_output_specs",
]
