import numpy as np
import pytest

from timeFit.bspline_basis import (
    SPLINE_ORDER,
    basis_matrix,
    basis_row,
    choose_control_points,
    cox_de_boor,
    default_n_control_points,
    place_knots,
)
from timeFit.exceptions import InvalidInputError


@pytest.mark.parametrize("q", range(4, 11))
def test_basis_sums_to_one_on_time_range(q):
    knots = place_knots(0.0, 5.0, q)
    grid = np.linspace(0.0, 5.0, 101)
    sums = basis_matrix(grid, knots, q).sum(axis=1)
    np.testing.assert_allclose(sums, 1.0, atol=1e-10)


def test_basis_is_nonnegative():
    q = 6
    knots = place_knots(-2.0, 3.0, q)
    values = basis_matrix(np.linspace(-2.0, 3.0, 57), knots, q)
    assert np.all(values >= 0)


def test_basis_vanishes_outside_knot_range():
    q = 5
    knots = place_knots(0.0, 1.0, q)
    np.testing.assert_array_equal(basis_row(knots[0] - 1.0, knots, q), np.zeros(q))
    np.testing.assert_array_equal(basis_row(knots[-1] + 1.0, knots, q), np.zeros(q))


def test_base_case_is_half_open():
    knots = [0.0, 1.0, 2.0]
    assert cox_de_boor(0, 1, 0.0, knots) == 1.0
    assert cox_de_boor(0, 1, 1.0, knots) == 0.0
    assert cox_de_boor(1, 1, 1.0, knots) == 1.0


def test_empty_knot_span_contributes_zero():
    # Repeated knots give 0/0 terms
    knots = [0.0, 0.0, 0.0, 1.0, 2.0]
    assert cox_de_boor(0, 2, 0.5, knots) == 0.0
    assert np.isfinite(cox_de_boor(0, 3, 0.5, knots))
    assert cox_de_boor(1, 2, 0.5, knots) == pytest.approx(0.5)


def test_linear_basis_is_hat_function():
    knots = [0.0, 1.0, 2.0]
    assert cox_de_boor(0, 2, 0.5, knots) == pytest.approx(0.5)
    assert cox_de_boor(0, 2, 1.0, knots) == pytest.approx(1.0)
    assert cox_de_boor(0, 2, 1.5, knots) == pytest.approx(0.5)


def test_control_points_for_twelve_time_points():
    time_points = np.array([0, 0.5, 1, 2, 3, 4, 6, 8, 10, 12, 18, 24], dtype=float)
    control_points, columns = choose_control_points(time_points)

    assert len(control_points) == default_n_control_points(12) == 6
    assert np.all(np.diff(control_points) > 0)
    assert control_points[0] == time_points[0]
    assert control_points[-1] == time_points[-1]
    np.testing.assert_array_equal(time_points[columns], control_points)


def test_control_points_are_nearest_to_equidistant_targets():
    time_points = np.arange(10, dtype=float)
    control_points, _ = choose_control_points(time_points, 4)
    np.testing.assert_array_equal(control_points, [0.0, 3.0, 6.0, 9.0])


def test_control_points_keep_room_for_later_points():
    # All inner targets lie near the end, yet every control point is distinct
    time_points = np.array([0.0, 1.0, 2.0, 3.0, 100.0])
    control_points, columns = choose_control_points(time_points, 5)
    np.testing.assert_array_equal(columns, np.arange(5))
    assert np.all(np.diff(control_points) > 0)


@pytest.mark.parametrize("n_control_points", [1, 3, 7])
def test_invalid_number_of_control_points(n_control_points):
    with pytest.raises(InvalidInputError):
        choose_control_points(np.arange(6, dtype=float), n_control_points)


@pytest.mark.parametrize("n_time_points", range(4, 25))
def test_knot_vector_length(n_time_points):
    time_points = np.linspace(0, 1, n_time_points)
    control_points, _ = choose_control_points(time_points)
    q = len(control_points)
    knots = place_knots(time_points[0], time_points[-1], q)
    assert len(knots) == q + SPLINE_ORDER


@pytest.mark.parametrize("q", range(3, 11))
def test_knots_are_increasing_and_cover_range(q):
    knots = place_knots(1.0, 7.0, q)
    assert len(knots) == q + 4
    assert np.all(np.diff(knots) > 0)
    assert knots[3] == 1.0
    assert knots[0] < 1.0 and knots[-1] > 7.0


def test_basis_matrix_shape():
    q = 5
    knots = place_knots(0.0, 10.0, q)
    assert basis_matrix(np.linspace(0, 10, 7), knots, q).shape == (7, q)
    assert basis_matrix(3.0, knots, q).shape == (1, q)


@pytest.mark.parametrize("n_time_points, expected", [(4, 4), (5, 4), (6, 4), (9, 5), (12, 6), (24, 10)])
def test_default_control_points_never_below_spline_order(n_time_points, expected):
    assert default_n_control_points(n_time_points) == expected


def test_three_time_points_cannot_carry_a_cubic_basis():
    with pytest.raises(InvalidInputError):
        choose_control_points(np.array([0.0, 1.0, 2.0]))


@pytest.mark.parametrize("n_time_points", [4, 5, 6])
def test_default_basis_sums_to_one_for_few_time_points(n_time_points):
    time_points = np.arange(n_time_points, dtype=float)
    control_points, _ = choose_control_points(time_points)
    q = len(control_points)
    knots = place_knots(time_points[0], time_points[-1], q)
    grid = np.linspace(time_points[0], time_points[-1], 9)
    np.testing.assert_allclose(basis_matrix(grid, knots, q).sum(axis=1), 1.0, atol=1e-12)
