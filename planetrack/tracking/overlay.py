"""
Diagnostics overlay showing the engine's internal tracking state.

The overlay is a transparent BGRA image the size of the input frame:
feature dots, motion vectors, the plane center and a status readout.
Rendering only reads the state it is given.
"""

from typing import Sequence

import numpy as np

from planetrack.core.types import Correspondence, FrameResult, PlaneHypothesis


FEATURE_COLOR = (0, 255, 0, 255)
VECTOR_COLOR = (0, 255, 255, 255)
PLANE_COLOR = (255, 255, 0)
TEXT_COLOR = (255, 255, 255, 255)

FEATURE_RADIUS = 5
PLANE_FILL_RADIUS = 20
PLANE_RING_RADIUS = 40


def status_lines(
    frame_count: int,
    feature_count: int,
    tracked_count: int,
    confidence: float,
    result: FrameResult,
) -> list[str]:
    """Text lines of the status readout."""
    return [
        f"Frame: {frame_count}",
        f"Features: {feature_count}",
        f"Tracked: {tracked_count}",
        f"Confidence: {confidence * 100:.0f}%",
        f"Status: {result.status.value}",
    ]


def _blend_over(canvas: np.ndarray, mask: np.ndarray, color: tuple, alpha: float) -> None:
    """Alpha-composite a flat color over ``canvas`` where ``mask`` is set."""
    if alpha <= 0:
        return
    region = canvas[mask].astype(np.float32)
    dst_alpha = region[:, 3:4] / 255.0
    out_alpha = alpha + dst_alpha * (1.0 - alpha)

    src = np.array(color, dtype=np.float32)
    rgb = (src * alpha + region[:, :3] * dst_alpha * (1.0 - alpha)) / out_alpha
    region[:, :3] = rgb
    region[:, 3:4] = out_alpha * 255.0
    canvas[mask] = np.clip(np.rint(region), 0, 255).astype(np.uint8)


class DiagnosticsOverlay:
    """
    Renders the diagnostics overlay.

    Attributes:
        draw_threshold: Minimum confidence for the plane center to be drawn
    """

    def __init__(self, draw_threshold: float = 0.3):
        self.draw_threshold = draw_threshold

    def render(
        self,
        width: int,
        height: int,
        frame_count: int,
        points: np.ndarray,
        correspondences: Sequence[Correspondence],
        plane: PlaneHypothesis | None,
        confidence: float,
        result: FrameResult,
    ) -> np.ndarray:
        """
        Draw the current tracking state.

        Returns:
            height x width x 4 BGRA image, transparent where nothing is drawn
        """
        import cv2

        canvas = np.zeros((height, width, 4), dtype=np.uint8)

        for x, y in np.asarray(points).reshape(-1, 2):
            cv2.circle(canvas, (int(x), int(y)), FEATURE_RADIUS, FEATURE_COLOR, -1)

        for c in correspondences:
            cv2.line(
                canvas,
                (int(c.prev[0]), int(c.prev[1])),
                (int(c.curr[0]), int(c.curr[1])),
                VECTOR_COLOR, 2,
            )

        if plane is not None and confidence > self.draw_threshold:
            center = (int(plane.center[0]), int(plane.center[1]))

            fill = np.zeros((height, width), dtype=np.uint8)
            cv2.circle(fill, center, PLANE_FILL_RADIUS, 255, -1)
            _blend_over(canvas, fill > 0, PLANE_COLOR, confidence)

            cv2.circle(canvas, center, PLANE_RING_RADIUS, (*PLANE_COLOR, 255), 3)

        lines = status_lines(
            frame_count, len(points), len(correspondences), confidence, result
        )
        for i, text in enumerate(lines):
            cv2.putText(
                canvas, text, (10, 25 + 20 * i),
                cv2.FONT_HERSHEY_SIMPLEX, 0.55, TEXT_COLOR, 2,
            )

        return canvas


def composite(frame: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """
    Blend a BGRA overlay onto a frame.

    Args:
        frame: BGR, RGBA or grayscale frame of the overlay's size

    Returns:
        BGR image
    """
    import cv2

    if frame.ndim == 2:
        base = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    elif frame.shape[2] == 4:
        base = cv2.cvtColor(frame, cv2.COLOR_RGBA2BGR)
    else:
        base = frame

    alpha = overlay[:, :, 3:4].astype(np.float32) / 255.0
    blended = base.astype(np.float32) * (1.0 - alpha) + overlay[:, :, :3] * alpha
    return np.clip(np.rint(blended), 0, 255).astype(np.uint8)
