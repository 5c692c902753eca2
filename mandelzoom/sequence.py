"""Scripted zoom sequences for batch animations."""

from __future__ import annotations

import math

import numpy as np

from .viewport import Viewport, scale_about_center

EASINGS = ("linear", "ease")


def _ease_in_out(t: float) -> float:
    return 3 * t ** 2 - 2 * t ** 3


def compute_zoom_factors(frames: int, final_zoom: float, *, easing: str = "ease") -> np.ndarray:
    """Per-frame zoom multipliers whose product is ``final_zoom``.

    The first frame's multiplier is always 1 so the sequence starts at the
    unzoomed view.
    """

    if frames <= 0:
        return np.array([], dtype=np.float64)
    if not (math.isfinite(final_zoom) and final_zoom > 0):
        raise ValueError(f"final_zoom must be a finite number greater than zero, got {final_zoom}.")

    easing_mode = easing.lower()
    if easing_mode not in EASINGS:
        raise ValueError(f"Unknown easing '{easing}'. Valid choices: {', '.join(EASINGS)}.")
    ease = (lambda u: u) if easing_mode == "linear" else _ease_in_out

    if frames == 1:
        alphas = np.array([1.0], dtype=np.float64)
    else:
        alphas = np.array([ease(i / (frames - 1)) for i in range(frames)], dtype=np.float64)
    alphas = np.clip(alphas, 0.0, 1.0)
    increments = np.diff(np.concatenate(([0.0], alphas)))
    return np.exp(increments * np.log(final_zoom))


def zoom_path(
    base: Viewport,
    width: int,
    height: int,
    center_x: float,
    center_y: float,
    final_zoom: float,
    frames: int,
    *,
    easing: str = "ease",
) -> list[Viewport]:
    """Viewports for each frame of a zoom into ``(center_x, center_y)``."""

    zooms = np.cumprod(compute_zoom_factors(frames, final_zoom, easing=easing))
    return [scale_about_center(base, width, height, center_x, center_y, float(zoom)) for zoom in zooms]
