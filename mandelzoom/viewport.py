"""Regions of the complex plane and the transforms that zoom them."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Viewport:
    """The rectangle of the complex plane mapped onto the pixel grid.

    Instances are immutable; zooming always produces a new rectangle so a
    reader never observes a half-updated set of bounds.
    """

    x_start: float
    x_end: float
    y_start: float
    y_end: float

    def __post_init__(self) -> None:
        bounds = (self.x_start, self.x_end, self.y_start, self.y_end)
        if not all(math.isfinite(value) for value in bounds):
            raise ValueError(f"Viewport bounds must be finite, got {bounds}.")
        if not self.x_end > self.x_start:
            raise ValueError(f"x_end ({self.x_end}) must be greater than x_start ({self.x_start}).")
        if not self.y_end > self.y_start:
            raise ValueError(f"y_end ({self.y_end}) must be greater than y_start ({self.y_start}).")

    @classmethod
    def new_default(cls) -> Viewport:
        return cls(-2.0, 2.0, -2.0, 2.0)

    @property
    def x_range(self) -> float:
        return self.x_end - self.x_start

    @property
    def y_range(self) -> float:
        return self.y_end - self.y_start

    @property
    def center(self) -> tuple[float, float]:
        return (self.x_start + self.x_end) / 2.0, (self.y_start + self.y_end) / 2.0

    @property
    def aspect(self) -> float:
        return self.x_range / self.y_range


def new_default() -> Viewport:
    """Return the canonical ``[-2, 2] x [-2, 2]`` square."""

    return Viewport.new_default()


def _check_canvas(canvas_width: float, canvas_height: float) -> None:
    if not (canvas_width > 0 and canvas_height > 0):
        raise ValueError(f"Canvas dimensions must be positive, got {canvas_width}x{canvas_height}.")


def _check_zoom(zoom_factor: float) -> None:
    if not (math.isfinite(zoom_factor) and zoom_factor > 0):
        raise ValueError(f"zoom_factor must be a finite number greater than zero, got {zoom_factor}.")


def scale_about_point(
    current: Viewport,
    canvas_width: float,
    canvas_height: float,
    cursor_x: float,
    cursor_y: float,
    zoom_factor: float,
) -> Viewport:
    """Zoom ``current`` by ``zoom_factor`` keeping the point under the cursor fixed.

    The cursor is given in canvas pixels with the origin in the top-left
    corner. The result is stretched along one axis so that its aspect ratio
    matches the canvas and pixels stay square.
    """

    _check_canvas(canvas_width, canvas_height)
    _check_zoom(zoom_factor)

    x_range = current.x_range
    y_range = current.y_range
    canvas_aspect = canvas_width / canvas_height

    anchor_x = current.x_start + (cursor_x / canvas_width) * x_range
    anchor_y = current.y_start + (cursor_y / canvas_height) * y_range

    x_start = anchor_x - (cursor_x / canvas_width) * (x_range / zoom_factor)
    x_end = anchor_x + ((canvas_width - cursor_x) / canvas_width) * (x_range / zoom_factor)
    y_start = anchor_y - (cursor_y / canvas_height) * (y_range / zoom_factor)
    y_end = anchor_y + ((canvas_height - cursor_y) / canvas_height) * (y_range / zoom_factor)

    if canvas_aspect > 1.0:
        adjusted_x_range = (y_end - y_start) * canvas_aspect
        x_center = (x_start + x_end) / 2.0
        x_start = x_center - adjusted_x_range / 2.0
        x_end = x_center + adjusted_x_range / 2.0
    else:
        adjusted_y_range = (x_end - x_start) / canvas_aspect
        y_center = (y_start + y_end) / 2.0
        y_start = y_center - adjusted_y_range / 2.0
        y_end = y_center + adjusted_y_range / 2.0

    return Viewport(x_start, x_end, y_start, y_end)


def scale_about_center(
    current: Viewport,
    canvas_width: float,
    canvas_height: float,
    center_x: float,
    center_y: float,
    zoom_factor: float,
) -> Viewport:
    """Build the rectangle for a scripted zoom on ``(center_x, center_y)``.

    ``current`` supplies the default extent as offsets from the center; the
    offsets shrink by ``zoom_factor`` and the shorter side is then widened to
    the canvas aspect ratio.
    """

    _check_canvas(canvas_width, canvas_height)
    _check_zoom(zoom_factor)
    if not (math.isfinite(center_x) and math.isfinite(center_y)):
        raise ValueError(f"Zoom center must be finite, got ({center_x}, {center_y}).")

    x_start = center_x + current.x_start / zoom_factor
    x_end = center_x + current.x_end / zoom_factor
    y_start = center_y + current.y_start / zoom_factor
    y_end = center_y + current.y_end / zoom_factor

    x_range = x_end - x_start
    y_range = y_end - y_start
    image_aspect = canvas_width / canvas_height
    adjustment = image_aspect / (x_range / y_range)

    if adjustment > 1.0:
        diff = (x_range * adjustment - x_range) / 2.0
        x_start -= diff
        x_end += diff
    else:
        diff = (y_range / adjustment - y_range) / 2.0
        y_start -= diff
        y_end += diff

    return Viewport(x_start, x_end, y_start, y_end)


def fit_canvas(current: Viewport, canvas_width: float, canvas_height: float) -> Viewport:
    """Return ``current`` aspect-corrected for the canvas, anchored at the top-left pixel."""

    return scale_about_point(current, canvas_width, canvas_height, 0.0, 0.0, 1.0)


@dataclass(frozen=True)
class SamplingGrid:
    """Per-pixel coordinate steps for a viewport rendered at a fixed size."""

    x_start: float
    y_start: float
    dx: float
    dy: float
    width: int
    height: int

    @classmethod
    def from_viewport(cls, viewport: Viewport, width: int, height: int) -> SamplingGrid:
        width = int(width)
        height = int(height)
        if width < 2 or height < 2:
            raise ValueError(f"Render size must be at least 2x2 pixels, got {width}x{height}.")
        return cls(
            x_start=viewport.x_start,
            y_start=viewport.y_start,
            dx=(viewport.x_end - viewport.x_start) / (width - 1),
            dy=(viewport.y_end - viewport.y_start) / (height - 1),
            width=width,
            height=height,
        )

    def columns(self) -> np.ndarray:
        """Real coordinate of every column."""

        return np.float64(self.x_start) + np.float64(self.dx) * np.arange(self.width, dtype=np.float64)

    def rows(self, start: int = 0, stop: int | None = None) -> np.ndarray:
        """Imaginary coordinate of rows ``start`` up to ``stop``."""

        stop = self.height if stop is None else stop
        return np.float64(self.y_start) + np.float64(self.dy) * np.arange(start, stop, dtype=np.float64)

    def pixel_to_complex(self, row: int, col: int) -> tuple[float, float]:
        return self.x_start + self.dx * col, self.y_start + self.dy * row
