import math

import numpy as np
import pytest

from mandelzoom.evaluator import escaped_ceiling, evaluate, evaluate_grid

MAX_ITER = 255

INTERIOR_POINTS = [(0.0, 0.0), (-1.0, 0.0), (-0.1, 0.1), (0.25, 0.0), (-0.5, 0.5)]
ESCAPING_POINTS = [(3.0, 3.0), (-2.0, -2.0), (1.0, 1.0), (2.0, 0.0), (0.5, 0.5), (-1.5, 1.5)]


@pytest.mark.parametrize("x, y", INTERIOR_POINTS)
def test_interior_points_return_exactly_max_iter(x, y):
    assert evaluate(x, y, MAX_ITER) == float(MAX_ITER)
    assert evaluate(x, y, MAX_ITER, smooth=False) == float(MAX_ITER)


@pytest.mark.parametrize("x, y", [(3.0, 3.0), (-2.5, 0.0), (0.0, 2.1), (100.0, -100.0), (1e6, 0.0)])
def test_points_outside_radius_two_escape_within_bounds(x, y):
    value = evaluate(x, y, MAX_ITER)
    assert 0.0 <= value < MAX_ITER
    assert math.isfinite(value)


def test_smoothing_correction_value():
    # |c| > 2 escapes before the first step; the count is refined from zero.
    expected = 1.0 - math.log(math.log(math.hypot(-2.0, -2.0))) / math.log(2.0)
    assert evaluate(-2.0, -2.0, MAX_ITER) == pytest.approx(expected)


def test_unsmoothed_counts_are_integers():
    assert evaluate(3.0, 3.0, MAX_ITER, smooth=False) == 0.0
    assert evaluate(1.0, 1.0, MAX_ITER, smooth=False) == 1.0
    value = evaluate(0.5, 0.5, MAX_ITER, smooth=False)
    assert value == int(value)
    assert 0 < value < MAX_ITER


def test_huge_orbit_is_clamped_to_zero():
    assert evaluate(1e6, 0.0, MAX_ITER) == 0.0


def test_escape_on_last_step_never_reports_interior():
    # 1.01 leaves the radius-2 disk on the final permitted step.
    value = evaluate(1.01, 0.0, 2)
    assert value < 2.0
    assert value == escaped_ceiling(2)


def test_reaching_the_bound_is_interior_even_if_orbit_escaped():
    assert evaluate(1.5, 0.0, 1) == 1.0


def test_invalid_max_iter():
    with pytest.raises(ValueError):
        evaluate(0.0, 0.0, 0)
    with pytest.raises(ValueError):
        evaluate_grid(np.zeros(2), np.zeros(2), 0)


@pytest.mark.parametrize("x, y", INTERIOR_POINTS + ESCAPING_POINTS)
def test_grid_agrees_with_scalar(x, y):
    grid = evaluate_grid([x], [y], MAX_ITER)
    assert grid.shape == (1, 1)
    assert grid[0, 0] == pytest.approx(evaluate(x, y, MAX_ITER), rel=1e-12, abs=1e-12)
    assert evaluate_grid([x], [y], MAX_ITER, smooth=False)[0, 0] == evaluate(x, y, MAX_ITER, smooth=False)


def test_grid_shape_is_rows_by_columns():
    xs = np.linspace(-2.0, 1.0, 7)
    ys = np.linspace(-1.0, 1.0, 3)
    grid = evaluate_grid(xs, ys, 50)
    assert grid.shape == (3, 7)
    assert grid.dtype == np.float64
    assert np.all(np.isfinite(grid))
    assert np.all((grid >= 0.0) & (grid <= 50.0))


def test_grid_interior_uses_exact_sentinel():
    grid = evaluate_grid([-2.0, 0.0, 2.5], [0.0], 100)
    assert grid[0, 1] == 100.0
    assert grid[0, 0] == 100.0  # -2 is the tip of the set and stays bounded
    assert grid[0, 2] < 100.0
