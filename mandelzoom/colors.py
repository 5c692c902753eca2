"""Mapping escape counts onto RGB colors."""

from __future__ import annotations

from typing import Sequence

import numpy as np

try:
    from matplotlib import colormaps as _mpl_colormaps
except ImportError:  # Matplotlib < 3.5
    from matplotlib import cm as _mpl_colormaps  # type: ignore

INTERIOR_COLOR = (0, 0, 0)

_LUT_SIZE = 256


def get_colormap(name):
    if hasattr(_mpl_colormaps, "get_cmap"):
        return _mpl_colormaps.get_cmap(name)
    return _mpl_colormaps[name]


class Gradient:
    """A read-only ``[0, 1] -> RGB`` lookup table.

    The table is sampled once from a matplotlib colormap and interpolated
    linearly between entries, so calls never touch matplotlib state and are
    safe from any number of threads.
    """

    def __init__(self, table: np.ndarray, name: str = "custom") -> None:
        table = np.array(table, dtype=np.float64)
        if table.ndim != 2 or table.shape[1] != 3 or table.shape[0] < 2:
            raise ValueError("Gradient table must have shape (N, 3) with N >= 2.")
        self._table = table
        self._table.setflags(write=False)
        self.name = name

    @classmethod
    def from_colormap(cls, name: str = "turbo", *, inverted: bool = False, size: int = _LUT_SIZE) -> Gradient:
        cmap = get_colormap(name)
        samples = np.linspace(0.0, 1.0, size)
        if inverted:
            samples = samples[::-1]
        rgba = np.asarray(cmap(samples), dtype=np.float64)
        return cls(rgba[:, :3] * 255.0, name=f"{name}_r" if inverted else name)

    @property
    def size(self) -> int:
        return self._table.shape[0]

    def __call__(self, t):
        """Evaluate at ``t`` (scalar or array); returns ``uint8`` RGB of shape ``t.shape + (3,)``."""

        t = np.clip(np.nan_to_num(np.asarray(t, dtype=np.float64), nan=0.0), 0.0, 1.0)
        position = t * (self.size - 1)
        lower = np.minimum(np.floor(position).astype(np.intp), self.size - 2)
        fraction = (position - lower)[..., np.newaxis]
        rgb = self._table[lower] * (1.0 - fraction) + self._table[lower + 1] * fraction
        return np.uint8(np.clip(np.rint(rgb), 0, 255))

    def __repr__(self) -> str:
        return f"Gradient({self.name!r}, size={self.size})"


def map_color(iteration: float, max_iter: int, gradient: Gradient, interior: Sequence[int] = INTERIOR_COLOR) -> tuple[int, int, int]:
    """Color for a single escape count; ``iteration == max_iter`` is interior."""

    if iteration == max_iter:
        return tuple(int(channel) for channel in interior)
    t = min(max(iteration / max_iter, 0.0), 1.0)
    r, g, b = gradient(t)
    return int(r), int(g), int(b)


def colorize(
    iterations: np.ndarray,
    max_iter: int,
    gradient: Gradient,
    channels: int = 3,
    interior: Sequence[int] = INTERIOR_COLOR,
) -> np.ndarray:
    """Vectorized :func:`map_color` producing ``uint8`` pixels with 3 or 4 channels."""

    if channels not in (3, 4):
        raise ValueError(f"channels must be 3 (RGB) or 4 (RGBA), got {channels}.")

    iterations = np.asarray(iterations, dtype=np.float64)
    inside = iterations == np.float64(max_iter)
    rgb = gradient(iterations / np.float64(max_iter))
    rgb[inside] = np.asarray(interior, dtype=np.uint8)

    if channels == 3:
        return rgb
    alpha = np.full(rgb.shape[:-1] + (1,), 255, dtype=np.uint8)
    return np.concatenate((rgb, alpha), axis=-1)


def parse_hex_color(value: str) -> tuple[int, int, int]:
    """Parse ``#RRGGBB`` into an RGB triple."""

    hex_color = value.lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Color must be in the form #RRGGBB, got '{value}'.")
    try:
        return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError as exc:
        raise ValueError(f"Color must contain only hexadecimal digits, got '{value}'.") from exc
