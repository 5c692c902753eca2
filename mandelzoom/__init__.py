"""Public API for Mandelbrot rendering and interactive zooming."""

from .colors import INTERIOR_COLOR, Gradient, colorize, map_color
from .config import PROFILES, RenderProfile, get_profile
from .evaluator import evaluate, evaluate_grid
from .renderer import RenderTarget, render, row_partitions
from .sequence import compute_zoom_factors, zoom_path
from .session import PendingRender, RenderSession, ThreadTimerScheduler, wheel_zoom_factor
from .viewport import SamplingGrid, Viewport, new_default, scale_about_center, scale_about_point

__all__ = [
    "Gradient",
    "INTERIOR_COLOR",
    "PROFILES",
    "PendingRender",
    "RenderProfile",
    "RenderSession",
    "RenderTarget",
    "SamplingGrid",
    "ThreadTimerScheduler",
    "Viewport",
    "colorize",
    "compute_zoom_factors",
    "evaluate",
    "evaluate_grid",
    "get_profile",
    "map_color",
    "new_default",
    "render",
    "row_partitions",
    "scale_about_center",
    "scale_about_point",
    "wheel_zoom_factor",
    "zoom_path",
]
