"""Parallel fill of a complete pixel buffer."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .colors import INTERIOR_COLOR, Gradient, colorize
from .config import DEFAULT_CHUNK_ROWS
from .evaluator import evaluate_grid
from .viewport import SamplingGrid, Viewport


@dataclass(frozen=True)
class RenderTarget:
    """A finished frame: row-major ``uint8`` pixels plus what produced them."""

    pixels: np.ndarray
    iterations: np.ndarray
    viewport: Viewport
    grid: SamplingGrid
    max_iter: int

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    def tobytes(self) -> bytes:
        """Raw buffer: rows top to bottom, each pixel R, G, B[, A]."""

        return self.pixels.tobytes(order="C")


def row_partitions(height: int, chunk_rows: int = DEFAULT_CHUNK_ROWS) -> list[range]:
    """Split ``range(height)`` into disjoint consecutive chunks of ``chunk_rows`` rows."""

    if chunk_rows < 1:
        raise ValueError(f"chunk_rows must be at least 1, got {chunk_rows}.")
    return [range(start, min(start + chunk_rows, height)) for start in range(0, height, chunk_rows)]


def render(
    viewport: Viewport,
    width: int,
    height: int,
    max_iter: int,
    gradient: Gradient,
    *,
    smooth: bool = True,
    channels: int = 3,
    interior: Sequence[int] = INTERIOR_COLOR,
    workers: Optional[int] = None,
    chunk_rows: int = DEFAULT_CHUNK_ROWS,
    device: Optional[str] = None,
) -> RenderTarget:
    """Render ``viewport`` into a fresh ``height x width`` buffer.

    Rows are split into chunks and each chunk is evaluated and colored by a
    worker thread that writes only its own slice of the buffer. The output
    does not depend on ``workers``.
    """

    grid = SamplingGrid.from_viewport(viewport, width, height)
    if channels not in (3, 4):
        raise ValueError(f"channels must be 3 (RGB) or 4 (RGBA), got {channels}.")
    if int(max_iter) < 1:
        raise ValueError(f"max_iter must be at least 1, got {max_iter}.")

    pixels = np.empty((grid.height, grid.width, channels), dtype=np.uint8)
    iterations = np.empty((grid.height, grid.width), dtype=np.float64)
    xs = grid.columns()

    def fill(rows: range) -> None:
        ys = grid.rows(rows.start, rows.stop)
        counts = evaluate_grid(xs, ys, max_iter, smooth, device=device)
        iterations[rows.start:rows.stop] = counts
        pixels[rows.start:rows.stop] = colorize(counts, max_iter, gradient, channels, interior)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(fill, rows) for rows in row_partitions(grid.height, chunk_rows)]
        for future in futures:
            future.result()

    return RenderTarget(
        pixels=pixels,
        iterations=iterations,
        viewport=viewport,
        grid=grid,
        max_iter=int(max_iter),
    )
