#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Gene Curve

Continuous representation of the expression time series of one gene, built
from the parameters of a fitted TimeFit model (Bar-Joseph et al., 2003,
Continuous representations of time-series gene expression data).
"""

from typing import Hashable, Optional, Sequence, Tuple, Union

import numpy as np

from .bspline_basis import SPLINE_ORDER, basis_row


def _frozen(values) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


class GeneCurve:
    """
    Read-only view of the fitted curve of a single gene.

    The value at time t is s(t) . (mu + gamma), where s(t) holds the values of
    the B-spline basis functions at t, mu is the centre of the gene's class
    and gamma the gene-specific deviation from it.
    """

    def __init__(self,
                 class_center: Sequence[float],
                 gene_deviation: Sequence[float],
                 knots: Sequence[float],
                 control_points: Sequence[float],
                 order: int = SPLINE_ORDER,
                 time_points: Optional[Sequence[float]] = None,
                 observations: Optional[Sequence[float]] = None,
                 gene_class: Optional[int] = None,
                 gene_name: Optional[Hashable] = None):
        """
        Parameters
        ----------
        class_center : array-like
            Spline coefficients of the class centre (length q)
        gene_deviation : array-like
            Gene-specific deviation from the class centre (length q)
        knots : array-like
            Knot vector (length q + order)
        control_points : array-like
            Time values of the q control points
        order : int, default=4
            Order of the spline
        time_points, observations : array-like, optional
            Measured time points and values of the gene
        gene_class : int, optional
            Class the gene was assigned to
        gene_name : hashable, optional
            Identifier of the gene
        """
        self.class_center = _frozen(class_center)
        self.gene_deviation = _frozen(gene_deviation)
        self.knots = _frozen(knots)
        self.control_points = _frozen(control_points)
        self.order = order

        q = len(self.control_points)
        if len(self.class_center) != q or len(self.gene_deviation) != q:
            raise ValueError(
                f"Class centre ({len(self.class_center)}) and deviation ({len(self.gene_deviation)}) "
                f"must have one coefficient per control point ({q})"
            )
        if len(self.knots) != q + order:
            raise ValueError(f"Expected {q + order} knots, got {len(self.knots)}")

        self.coefficients = _frozen(self.class_center + self.gene_deviation)

        self.time_points = None if time_points is None else _frozen(time_points)
        self.observations = None if observations is None else _frozen(observations)
        self.gene_class = gene_class
        self.gene_name = gene_name

    @property
    def n_control_points(self) -> int:
        return len(self.control_points)

    def basis(self, t: float) -> np.ndarray:
        """Values of the basis functions at time t."""
        return basis_row(t, self.knots, self.n_control_points, self.order)

    def evaluate(self, t: float) -> float:
        """
        Value of the continuous model at time t.

        Outside the knot range all basis functions vanish, so the curve
        decays to 0 there instead of raising.
        """
        return float(self.basis(t) @ self.coefficients)

    def __call__(self, t: Union[float, Sequence[float]]) -> Union[float, np.ndarray]:
        if np.ndim(t) == 0:
            return self.evaluate(float(t))
        return np.array([self.evaluate(x) for x in np.asarray(t, dtype=np.float64)])

    def sample(self, n_points: int = 100) -> Tuple[np.ndarray, np.ndarray]:
        """
        Evaluate the curve on an evenly spaced grid between the first and the
        last control point.

        Returns
        -------
        times : np.ndarray
            Grid of n_points time values
        values : np.ndarray
            Model values on the grid
        """
        times = np.linspace(self.control_points[0], self.control_points[-1], n_points)
        return times, self(times)

    def residuals(self) -> np.ndarray:
        """Observed minus modelled values at the measured time points."""
        if self.time_points is None or self.observations is None:
            raise ValueError("No observations attached to this curve")
        return self.observations - self(self.time_points)

    def __repr__(self) -> str:
        name = "" if self.gene_name is None else f"gene={self.gene_name!r}, "
        return (f"GeneCurve({name}class={self.gene_class}, "
                f"n_control_points={self.n_control_points}, order={self.order})")
