"""Viewport auto-scaling for the fixed logical board canvas."""

from __future__ import annotations

from dataclasses import dataclass
import math

BOARD_BASE_WIDTH = 1280
BOARD_BASE_HEIGHT = 720
MIN_BOARD_SCALE = 0.1
MAX_BOARD_SCALE = 10.0

SCALE_DEAD_ZONE = 0.01
MEASURE_DEAD_ZONE = 0.5


@dataclass(frozen=True)
class ViewportScale:
    """Per-axis scale factors applied to the board canvas."""

    x: float = 1.0
    y: float = 1.0


def _positive(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


def clamp_scale(value: float) -> float:
    """Clamp a scale to [0.1, 10]; non-finite or non-positive values become 1."""
    if not _positive(value):
        return 1.0
    return min(max(float(value), MIN_BOARD_SCALE), MAX_BOARD_SCALE)


def _axis_scale(viewport: float, canvas: float) -> float:
    if not _positive(viewport) or not _positive(canvas):
        return 1.0
    return clamp_scale(viewport / canvas)


def compute_scale(
    viewport_width: float,
    viewport_height: float,
    canvas_width: float = BOARD_BASE_WIDTH,
    canvas_height: float = BOARD_BASE_HEIGHT,
) -> ViewportScale:
    """Map the logical canvas onto the viewport, each axis independently."""
    return ViewportScale(
        x=_axis_scale(viewport_width, canvas_width),
        y=_axis_scale(viewport_height, canvas_height),
    )


def canvas_size(measured_width: float, measured_height: float) -> tuple[float, float]:
    """Logical canvas: the base size, grown to the measured content when larger."""
    width = measured_width if _positive(measured_width) else BOARD_BASE_WIDTH
    height = measured_height if _positive(measured_height) else BOARD_BASE_HEIGHT
    return max(BOARD_BASE_WIDTH, width), max(BOARD_BASE_HEIGHT, height)


class ScaleTracker:
    """Holds the current scale and recomputes it on resize or content-size changes."""

    def __init__(
        self,
        viewport_width: float = BOARD_BASE_WIDTH,
        viewport_height: float = BOARD_BASE_HEIGHT,
    ) -> None:
        self._viewport = (viewport_width, viewport_height)
        self._measured = (float(BOARD_BASE_WIDTH), float(BOARD_BASE_HEIGHT))
        self._scale = compute_scale(viewport_width, viewport_height, *self.canvas)

    @property
    def scale(self) -> ViewportScale:
        return self._scale

    @property
    def viewport(self) -> tuple[float, float]:
        return self._viewport

    @property
    def canvas(self) -> tuple[float, float]:
        return canvas_size(*self._measured)

    def resize(self, viewport_width: float, viewport_height: float) -> bool:
        """Handle a viewport resize; returns True when the scale changed."""
        self._viewport = (viewport_width, viewport_height)
        return self._recompute()

    def measure(self, content_width: float, content_height: float) -> bool:
        """Handle a new natural content size; returns True when the scale changed."""
        if not _positive(content_width) or not _positive(content_height):
            return False
        prev_w, prev_h = self._measured
        if abs(prev_w - content_width) > MEASURE_DEAD_ZONE or abs(prev_h - content_height) > MEASURE_DEAD_ZONE:
            self._measured = (float(content_width), float(content_height))
        return self._recompute()

    def _recompute(self) -> bool:
        candidate = compute_scale(*self._viewport, *self.canvas)
        dx = abs(self._scale.x - candidate.x)
        dy = abs(self._scale.y - candidate.y)
        if dx > SCALE_DEAD_ZONE or dy > SCALE_DEAD_ZONE:
            self._scale = candidate
            return True
        return False


__all__ = [
    "BOARD_BASE_WIDTH",
    "BOARD_BASE_HEIGHT",
    "MIN_BOARD_SCALE",
    "MAX_BOARD_SCALE",
    "ViewportScale",
    "clamp_scale",
    "compute_scale",
    "canvas_size",
    "ScaleTracker",
]
