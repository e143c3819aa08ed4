"""
Base classes for output handlers.

Outputs are requested on the command line as ``type=key=value:key=value``
strings, e.g. ``poses=filename=run.csv:trackingonly=true``. OutputSpec
splits such a string; BaseOutput is what every handler implements.
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path

import numpy as np


# Split on ':' only where the next token starts a new key, so values
# such as Windows paths keep their colons.
_OPTION_SEPARATOR = re.compile(r":(?=[A-Za-z_]\w*=)")

_TRUE_VALUES = ('true', 'yes', '1', 'on')


class OutputSpec:
    """
    A parsed output request.

    Example:
        >>> spec = OutputSpec("overlay=filename=debug.mp4:fps=15")
        >>> spec.output_type
        'overlay'
        >>> spec.get_float('fps')
        15.0
    """

    def __init__(self, spec_string: str):
        """
        Raises:
            ValueError: If the spec string is empty or an option has no '='
        """
        if not spec_string or not spec_string.strip():
            raise ValueError("Empty output specification")

        output_type, _, options_str = spec_string.partition('=')
        self.output_type: str = output_type.strip().lower()
        self.options: dict[str, str] = {}

        if options_str:
            for option in _OPTION_SEPARATOR.split(options_str):
                key, sep, value = option.partition('=')
                if not sep:
                    raise ValueError(
                        f"Option {option!r} in {spec_string!r} is not key=value"
                    )
                self.options[key.strip().lower()] = value.strip()

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.options.get(key.lower(), default)

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Option as float; ``default`` when missing or not a number."""
        try:
            return float(self.options[key.lower()])
        except (KeyError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        val = self.get(key)
        if val is None:
            return default
        return val.lower() in _TRUE_VALUES

    def __repr__(self) -> str:
        return f"OutputSpec(type={self.output_type}, options={self.options})"


class BaseOutput(ABC):
    """
    Abstract base class for all output handlers.

    Subclasses must implement:
        - _get_default_suffix(): Default filename suffix
        - _get_default_extension(): Default file extension
        - initialize(): Set up the output (open files, etc.)
        - process_frame(): Consume one frame's tracking data
        - finalize(): Clean up resources

    ``tracking_data`` passed to process_frame() holds:
        result: the FrameResult
        overlay: the BGRA diagnostics overlay (or None)
        confidence: the engine's plane confidence
    """

    def __init__(self, spec: OutputSpec, input_path: str):
        self.spec = spec
        self.input_path = Path(input_path)
        self.output_path = self._resolve_output_path()

    @abstractmethod
    def _get_default_suffix(self) -> str:
        pass

    @abstractmethod
    def _get_default_extension(self) -> str:
        pass

    def _resolve_output_path(self) -> Path:
        """Resolve the output path from spec or generate default."""
        filename = self.spec.get('filename')
        if filename:
            return Path(filename)

        stem = self.input_path.stem
        suffix = self._get_default_suffix()
        ext = self._get_default_extension()
        return Path(f"{stem}{suffix}.{ext}")

    @abstractmethod
    def initialize(self, video_props: dict) -> None:
        """
        Initialize the output (open files, create writers, etc).

        Args:
            video_props: Dictionary with 'width', 'height', 'fps'
        """
        pass

    @abstractmethod
    def process_frame(
        self,
        frame_num: int,
        frame: np.ndarray,
        tracking_data: dict,
    ) -> None:
        pass

    @abstractmethod
    def finalize(self) -> None:
        pass

    def get_output_path(self) -> Path:
        return self.output_path

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finalize()
        return False
