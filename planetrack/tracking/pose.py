"""
Pose fusion from plane motion and device orientation.

Lateral position comes from the plane's mean image motion scaled into
world units; depth is a fixed standoff. Rotation is the raw orientation
sample converted to radians, with no filtering.
"""

import math

from planetrack.core.config import TrackerSettings
from planetrack.core.types import OrientationSample, PlaneHypothesis, PoseEstimate


class PoseEstimator:
    """Turns an accepted plane hypothesis into a placement pose."""

    def __init__(self, settings: TrackerSettings):
        self.settings = settings

    def estimate(
        self,
        plane: PlaneHypothesis,
        orientation: OrientationSample,
    ) -> PoseEstimate:
        """
        Fuse plane motion with an orientation sample.

        Image x grows rightward and y downward, so x motion is negated and
        y motion kept as is. Pitch (beta) maps to the x axis, roll (gamma)
        to y and heading (alpha) to z.
        """
        dx, dy = plane.motion
        scale = self.settings.motion_scale

        position = (-dx * scale, dy * scale, self.settings.standoff_depth)
        rotation = (
            math.radians(orientation.beta),
            math.radians(orientation.gamma),
            math.radians(orientation.alpha),
        )
        return PoseEstimate(
            position=position,
            rotation=rotation,
            plane_center=plane.center,
            confidence=plane.confidence,
        )
