#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
B-spline Basis Functions

This module provides the spline primitives shared by the model fitter and the
per-gene curves: the Cox-de Boor recursion for normalized B-spline basis
functions, the selection of control points from the measured time points,
the placement of the knot vector and the construction of basis matrices.
"""

import numpy as np
from typing import Optional, Sequence, Tuple

from .exceptions import InvalidInputError

# Cubic splines throughout
SPLINE_ORDER = 4


def cox_de_boor(i: int, k: int, t: float, knots: Sequence[float]) -> float:
    """
    Evaluate the normalized B-spline basis function b_{i,k} at t.

    Parameters
    ----------
    i : int
        Index of the basis function
    k : int
        Order of the basis polynomial (k=4 for a cubic polynomial)
    t : float
        Argument of the basis function
    knots : sequence of float
        Non-decreasing knot vector

    Returns
    -------
    float
        Value of b_{i,k}(t). Terms whose knot span is empty contribute 0.
    """
    if k == 1:
        return 1.0 if knots[i] <= t < knots[i + 1] else 0.0

    left = 0.0
    left_span = knots[i + k - 1] - knots[i]
    if left_span != 0:
        left = (t - knots[i]) / left_span * cox_de_boor(i, k - 1, t, knots)

    right = 0.0
    right_span = knots[i + k] - knots[i + 1]
    if right_span != 0:
        right = (knots[i + k] - t) / right_span * cox_de_boor(i + 1, k - 1, t, knots)

    return left + right


def default_n_control_points(n_time_points: int, order: int = SPLINE_ORDER) -> int:
    """
    Number of control points used for n_time_points measurements.

    At least order control points are used, since fewer basis functions
    cannot sum to one anywhere on the time range.
    """
    return min(max(n_time_points // 3 + 2, order), n_time_points)


def choose_control_points(time_points: np.ndarray,
                          n_control_points: Optional[int] = None,
                          order: int = SPLINE_ORDER) -> Tuple[np.ndarray, np.ndarray]:
    """
    Choose roughly equidistant control points among the measured time points.

    The first and last time point are always control points. Every inner
    control point is the measured time point closest to its equidistant
    target, searched among the points after the previously chosen one while
    leaving enough points for the remaining targets.

    Parameters
    ----------
    time_points : np.ndarray
        Strictly increasing measured time points
    n_control_points : int, optional
        Number of control points. If None, uses default_n_control_points.
    order : int, optional (default=4)
        Order of the spline; the minimum number of control points

    Returns
    -------
    control_points : np.ndarray
        Time values of the control points (strictly increasing)
    columns : np.ndarray
        Index of each control point in time_points
    """
    time_points = np.asarray(time_points, dtype=np.float64)
    n = len(time_points)
    q = default_n_control_points(n, order) if n_control_points is None else int(n_control_points)
    if q < order or q > n:
        raise InvalidInputError(
            f"Number of control points must be between {order} and the number of time points ({n}), got {q}"
        )

    first, last = time_points[0], time_points[-1]
    targets = first + np.arange(q) * (last - first) / (q - 1)

    columns = np.zeros(q, dtype=int)
    columns[-1] = n - 1
    for i in range(1, q - 1):
        lo = columns[i - 1] + 1
        hi = n - (q - i)  # keep room for the remaining control points
        candidates = np.arange(lo, hi + 1)
        distances = np.abs(time_points[candidates] - targets[i])
        columns[i] = candidates[np.argmin(distances)]

    return time_points[columns], columns


def place_knots(first_time: float, last_time: float, n_control_points: int,
                order: int = SPLINE_ORDER) -> np.ndarray:
    """
    Place n_control_points + order equidistant knots.

    order - 1 knots are padded below the first and above the last time point
    so that the basis functions sum to one on [first_time, last_time]
    whenever n_control_points >= order.

    Parameters
    ----------
    first_time, last_time : float
        Range of the measured time points
    n_control_points : int
        Number of basis functions q
    order : int, optional (default=4)
        Order of the spline

    Returns
    -------
    knots : np.ndarray
        Knot vector of length n_control_points + order
    """
    n_intervals = max(n_control_points - order + 1, 1)
    step = (last_time - first_time) / n_intervals
    knots = first_time + step * (np.arange(n_control_points + order) - (order - 1))
    # Pin the domain ends exactly
    knots[order - 1] = first_time
    if n_control_points >= order:
        knots[n_control_points] = last_time
    return knots


def basis_row(t: float, knots: Sequence[float], n_control_points: int,
              order: int = SPLINE_ORDER) -> np.ndarray:
    """Values of all n_control_points basis functions at time t."""
    return np.array([cox_de_boor(j, order, t, knots) for j in range(n_control_points)])


def basis_matrix(time_points: Sequence[float], knots: Sequence[float], n_control_points: int,
                 order: int = SPLINE_ORDER) -> np.ndarray:
    """
    Compute the basis matrix S with S[i, j] = b_{j,order}(time_points[i]).

    Returns
    -------
    np.ndarray
        Matrix of shape (len(time_points), n_control_points)
    """
    time_points = np.atleast_1d(np.asarray(time_points, dtype=np.float64))
    s_matrix = np.zeros((len(time_points), n_control_points))
    for i, t in enumerate(time_points):
        s_matrix[i] = basis_row(t, knots, n_control_points, order)
    return s_matrix
