"""
Value types shared by the tracking components.

Everything here is an immutable snapshot or a plain record; the mutable
tracking state lives on the TrackingEngine.
"""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Generic, TypeVar

import numpy as np


T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a vision primitive call.

    Either ``ok`` with ``value`` set, or a failure carrying ``reason``.
    Callers treat a failure as an empty result for the current frame.
    """
    ok: bool
    value: T | None = None
    reason: str = ""

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> "Outcome[T]":
        return cls(ok=False, reason=reason)


@dataclass(frozen=True)
class Correspondence:
    """A point tracked from the previous frame into the current one."""
    prev: tuple[float, float]
    curr: tuple[float, float]

    @property
    def dx(self) -> float:
        return self.curr[0] - self.prev[0]

    @property
    def dy(self) -> float:
        return self.curr[1] - self.prev[1]

    @property
    def displacement(self) -> float:
        return math.hypot(self.dx, self.dy)


@dataclass(frozen=True)
class PlaneHypothesis:
    """Center of the tracked surface, confidence and mean image motion."""
    center: tuple[float, float]
    confidence: float
    motion: tuple[float, float]


@dataclass(frozen=True)
class OrientationSample:
    """Device orientation angles in degrees."""
    alpha: float = 0.0  # heading
    beta: float = 0.0   # pitch
    gamma: float = 0.0  # roll

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class PoseEstimate:
    """Placement pose: position in world units, rotation in radians."""
    position: tuple[float, float, float]
    rotation: tuple[float, float, float]
    plane_center: tuple[float, float]
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": dict(zip("xyz", self.position)),
            "rotation": dict(zip("xyz", self.rotation)),
            "plane_center": dict(zip("xy", self.plane_center)),
            "confidence": self.confidence,
        }


class TrackingStatus(Enum):
    """Status label shown by the diagnostics overlay."""
    NO_FEATURES = "NO FEATURES"
    SEARCHING = "SEARCHING"
    TRACKING = "TRACKING"


@dataclass
class FrameResult:
    """Per-frame output of TrackingEngine.process_frame()."""
    is_tracking: bool = False
    has_features: bool = False
    feature_count: int = 0
    plane_count: int = 0
    pose: PoseEstimate | None = None
    orientation: OrientationSample = field(default_factory=OrientationSample)

    @property
    def status(self) -> TrackingStatus:
        if self.is_tracking:
            return TrackingStatus.TRACKING
        if self.has_features:
            return TrackingStatus.SEARCHING
        return TrackingStatus.NO_FEATURES

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        return {
            "is_tracking": self.is_tracking,
            "has_features": self.has_features,
            "feature_count": self.feature_count,
            "plane_count": self.plane_count,
            "pose": self.pose.to_dict() if self.pose is not None else None,
            "orientation": self.orientation.to_dict(),
        }


def empty_points() -> np.ndarray:
    """An empty N x 2 float32 point array."""
    return np.empty((0, 2), dtype=np.float32)
