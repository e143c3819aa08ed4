"""
Configuration management for the planetrack engine.

Tunables live in a single TrackerSettings dataclass. Settings can be
loaded from JSON files, overridden from environment variables, or
updated at runtime with a partial mapping.
"""

import json
import os
from dataclasses import dataclass, fields, asdict, replace
from pathlib import Path
from typing import Any, Mapping

from planetrack.core.errors import ConfigError


ENV_PREFIX = "PLANETRACK_"


@dataclass(frozen=True)
class TrackerSettings:
    """
    Tunables for detection, tracking, plane estimation and pose fusion.

    Example:
        settings = TrackerSettings.from_dict({"max_corners": 100})
        engine = TrackingEngine(settings)
    """
    # Shi-Tomasi corner detection
    max_corners: int = 200
    quality_level: float = 0.01
    min_distance: float = 15.0
    block_size: int = 7

    # Lucas-Kanade optical flow
    win_size: int = 21
    max_level: int = 3
    flow_max_iter: int = 30
    flow_epsilon: float = 0.01

    # Feature set refresh
    min_features: int = 15
    refresh_interval: int = 15

    # Correspondence filtering, pixels
    max_displacement: float = 50.0

    # Plane hypothesis
    min_correspondences: int = 8
    coherence_threshold: float = 100.0
    confidence_step_up: float = 0.15
    confidence_step_down: float = 0.1
    acceptance_threshold: float = 0.5
    plane_draw_threshold: float = 0.3

    # Pose fusion
    motion_scale: float = 0.001
    standoff_depth: float = 3.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrackerSettings":
        """Build settings from a partial mapping; missing keys keep defaults."""
        return cls().updated(**data)

    def updated(self, **overrides: Any) -> "TrackerSettings":
        """Return a validated copy with ``overrides`` applied."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

        coerced = {
            name: _coerce(name, value, type(getattr(self, name)))
            for name, value in overrides.items()
        }
        settings = replace(self, **coerced)
        settings.validate()
        return settings

    def validate(self) -> None:
        """Raise ConfigError if any tunable is out of range."""
        positive_ints = (
            "max_corners", "block_size", "win_size",
            "flow_max_iter", "refresh_interval",
        )
        for name in positive_ints:
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1")

        non_negative = (
            "max_level", "min_features", "min_correspondences",
            "min_distance", "flow_epsilon", "coherence_threshold",
            "motion_scale",
        )
        for name in non_negative:
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0")

        if not 0 < self.quality_level <= 1:
            raise ConfigError("quality_level must be in (0, 1]")
        if self.max_displacement <= 0:
            raise ConfigError("max_displacement must be > 0")

        unit_interval = (
            "confidence_step_up", "confidence_step_down",
            "acceptance_threshold", "plane_draw_threshold",
        )
        for name in unit_interval:
            if not 0 <= getattr(self, name) <= 1:
                raise ConfigError(f"{name} must be in [0, 1]")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _coerce(name: str, value: Any, target: type) -> Any:
    """Convert ``value`` to the type of the default for ``name``."""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be numeric, got {value!r}")
    try:
        if target is int:
            as_float = float(value)
            if not as_float.is_integer():
                raise ConfigError(f"{name} must be an integer, got {value!r}")
            return int(as_float)
        return target(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from e


def load_settings(path: str | Path) -> TrackerSettings:
    """
    Load settings from a JSON file.

    Args:
        path: Path to a JSON object of tunables (any subset)

    Returns:
        Validated TrackerSettings

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the file is not a JSON object or holds bad values
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file must contain a JSON object: {path}")

    return TrackerSettings.from_dict(data)


def save_settings(settings: TrackerSettings, path: str | Path) -> None:
    """Write settings to a JSON file."""
    path = Path(path)
    with open(path, "w") as f:
        json.dump(settings.to_dict(), f, indent=2)


def settings_from_env(
    base: TrackerSettings | None = None,
    prefix: str = ENV_PREFIX,
) -> TrackerSettings:
    """
    Apply environment overrides on top of ``base``.

    Variable names are the field names upper-cased with the prefix, e.g.
    PLANETRACK_MAX_CORNERS=100 -> max_corners=100.
    """
    base = base or TrackerSettings()
    names = {f.name for f in fields(base)}
    overrides = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        name = key[len(prefix):].lower()
        if name in names:
            overrides[name] = value
    if not overrides:
        return base
    return base.updated(**overrides)
