"""Escape-time evaluation of the Mandelbrot iteration ``z <- z**2 + c``."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np
import tensorflow as tf

# Escape once |z|**2 exceeds this (|z| > 2).
BAILOUT_SQUARED = 4.0

_LN2 = math.log(2.0)


def _check_max_iter(max_iter: int) -> int:
    max_iter = int(max_iter)
    if max_iter < 1:
        raise ValueError(f"max_iter must be at least 1, got {max_iter}.")
    return max_iter


def escaped_ceiling(max_iter: int) -> float:
    """Largest count an escaped point may report; always below ``max_iter``."""

    return math.nextafter(float(max_iter), 0.0)


def evaluate(x: float, y: float, max_iter: int, smooth: bool = True) -> float:
    """Return the (optionally fractional) escape count of ``c = x + iy``.

    Points that never escape within ``max_iter`` steps return exactly
    ``float(max_iter)``. Escaped points return a value in
    ``[0, max_iter)``; with ``smooth`` the integer count is refined by
    ``1 - log2(ln|z|)`` so neighbouring pixels blend instead of banding.
    """

    max_iter = _check_max_iter(max_iter)
    zr, zi = float(x), float(y)
    cr, ci = zr, zi
    iterations = 0

    while zr * zr + zi * zi <= BAILOUT_SQUARED and iterations < max_iter:
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
        iterations += 1

    if iterations >= max_iter:
        return float(max_iter)
    if not smooth:
        return float(iterations)

    log_zn = math.log(math.sqrt(zr * zr + zi * zi))
    if not log_zn > 0.0:
        return float(iterations)
    value = iterations + 1.0 - math.log(log_zn) / _LN2
    return min(max(value, 0.0), escaped_ceiling(max_iter))


def _escape_step(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor, ns: tf.Tensor, active: tf.Tensor):
    """Advance every point that is still bounded by one iteration."""

    zr_new = zr * zr - zi * zi + cr
    zi_new = 2.0 * zr * zi + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    ns = ns + tf.cast(active, tf.int32)
    bounded = zr * zr + zi * zi <= tf.constant(BAILOUT_SQUARED, dtype=zr.dtype)
    return zr, zi, ns, tf.logical_and(active, bounded)


@tf.function(
    input_signature=[
        tf.TensorSpec(shape=[None, None], dtype=tf.float64),
        tf.TensorSpec(shape=[None, None], dtype=tf.float64),
        tf.TensorSpec(shape=[], dtype=tf.int32),
    ]
)
def _escape_run(cr: tf.Tensor, ci: tf.Tensor, max_iter: tf.Tensor):
    """Iterate a block of points with a TensorFlow while loop."""

    i = tf.constant(0, dtype=tf.int32)
    ns = tf.zeros_like(cr, dtype=tf.int32)
    active = cr * cr + ci * ci <= tf.constant(BAILOUT_SQUARED, dtype=tf.float64)

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iter), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _escape_step(zr, zi, cr, ci, ns, active)
        return i + 1, zr, zi, ns, active

    _, zr, zi, ns, _ = tf.while_loop(cond, body, (i, cr, ci, ns, active))
    return zr, zi, ns


def evaluate_grid(
    xs: np.ndarray,
    ys: np.ndarray,
    max_iter: int,
    smooth: bool = True,
    *,
    device: Optional[str] = None,
) -> np.ndarray:
    """Evaluate every ``(xs[col], ys[row])`` pair at once.

    Returns a ``float64`` array of shape ``(len(ys), len(xs))`` with the same
    meaning as :func:`evaluate`.
    """

    max_iter = _check_max_iter(max_iter)
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)

    with tf.device(device if device is not None else "/CPU:0"):
        X, Y = tf.meshgrid(tf.convert_to_tensor(xs), tf.convert_to_tensor(ys))
        zr, zi, ns = _escape_run(X, Y, tf.constant(max_iter, dtype=tf.int32))

    counts = ns.numpy().astype(np.float64)
    escaped = ns.numpy() < max_iter
    if not smooth:
        return counts

    zr = zr.numpy()
    zi = zi.numpy()
    with np.errstate(divide="ignore", invalid="ignore"):
        log_zn = np.log(np.sqrt(zr * zr + zi * zi))
        correctable = escaped & (log_zn > 0.0)
        nu = np.log(np.where(correctable, log_zn, 1.0)) / _LN2
    refined = np.where(correctable, counts + 1.0 - nu, counts)
    refined = np.clip(refined, 0.0, escaped_ceiling(max_iter))
    return np.where(escaped, refined, np.float64(max_iter))
