#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TimeFit

This module provides a class for computing a continuous representation of
gene expression time series (Bar-Joseph et al., 2003, Continuous
representations of time-series gene expression data. Journal of
Computational Biology).

All genes are fitted jointly: every gene is modelled as a cubic B-spline whose
coefficients are the centre of its (latent) class plus a gene-specific
deviation. An Expectation-Maximization algorithm estimates the class centres,
the class covariance matrices, the gene deviations, the noise variance and
the class membership probabilities. The fitted parameters of a single gene
are handed out as a GeneCurve.
"""

import time
import warnings
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from scipy.special import logsumexp
from sklearn.cluster import KMeans
from sklearn.exceptions import ConvergenceWarning
from tqdm.auto import tqdm

from .bspline_basis import SPLINE_ORDER, basis_matrix, choose_control_points, place_knots
from .exceptions import InvalidInputError, NumericDegeneracyWarning, SingularModelError
from .gene_curve import GeneCurve
from .timeseries_utils import (
    extract_times,
    time_series_to_matrix,
    validate_observations,
    validate_time_points,
)

# Range of exponents a plain double can hold
_LOG_MAX = np.log(np.finfo(np.float64).max)
_LOG_TINY = np.log(np.finfo(np.float64).tiny)


@dataclass
class FitState:
    """
    Mutable parameters of the EM algorithm.

    Attributes
    ----------
    mu : np.ndarray
        Class centres, shape (n_classes, q)
    gamma : np.ndarray
        Gene deviations for every class, shape (n_classes, n_genes, q)
    cov_matrices : np.ndarray
        Class covariance matrices, shape (n_classes, q, q)
    inverse_cov_matrices : np.ndarray
        Their (regularized pseudo-) inverses
    variance : float
        Noise variance shared by all genes
    class_probs : np.ndarray
        Prior probability of each class
    gene_variances : np.ndarray
        Variance of each gene's values at the control points
    gene2class : np.ndarray
        Class of each gene
    probs, log_probs : np.ndarray
        Responsibilities P(j|i) and their logarithms, shape (n_genes, n_classes)
    n_rescaled : int
        Genes of the last E-step whose factors exceed the double range
    n_degenerate : int
        Genes of the last E-step that got uniform responsibilities
    """

    mu: np.ndarray
    gamma: np.ndarray
    cov_matrices: np.ndarray
    inverse_cov_matrices: np.ndarray
    variance: float
    class_probs: np.ndarray
    gene_variances: np.ndarray
    gene2class: np.ndarray
    probs: Optional[np.ndarray] = None
    log_probs: Optional[np.ndarray] = None
    log_likelihood: float = np.nan
    previous_log_likelihood: float = np.nan
    iteration: int = 0
    converged: bool = False
    log_likelihood_trace: List[float] = field(default_factory=list)
    n_rescaled: int = 0
    n_degenerate: int = 0

    @property
    def n_classes(self) -> int:
        return self.mu.shape[0]

    @property
    def n_genes(self) -> int:
        return self.gamma.shape[1]

    def class2genes(self) -> List[np.ndarray]:
        """Indices of the genes currently assigned to each class."""
        return [np.flatnonzero(self.gene2class == j) for j in range(self.n_classes)]


class TimeFit:
    """
    Fit a mixture of B-spline curves to the time series of many genes.

    Genes are clustered into latent classes with a shared class centre and a
    class covariance describing how genes deviate from that centre. After
    fitting, every gene has a continuous model that can be evaluated at any
    time point.
    """

    def __init__(self,
                 n_classes: int = 20,
                 threshold: float = 0.005,
                 min_iterations: int = 3,
                 max_iterations: int = 15,
                 n_control_points: Optional[int] = None,
                 init_method: str = 'random',
                 reg_covar: float = 1e-6,
                 min_variance: float = 1e-6,
                 random_state: Optional[Union[int, np.random.Generator]] = None,
                 n_jobs: int = 1,
                 verbose: bool = True):
        """
        Initialize the TimeFit model.

        Parameters:
        -----------
        n_classes : int, optional (default=20)
            Number of gene classes
        threshold : float, optional (default=0.005)
            The EM algorithm stops once log_likelihood / previous_log_likelihood
            reaches 1 - threshold
        min_iterations : int, optional (default=3)
            Minimum number of EM iterations
        max_iterations : int, optional (default=15)
            Maximum number of EM iterations
        n_control_points : int, optional (default=None)
            Number of spline control points. If None, uses
            max(n_time_points // 3 + 2, 4), capped at n_time_points.
            Must be at least 4 (the spline order).
        init_method : str, optional (default='random')
            'random' picks random genes as class centres and assigns genes to
            classes uniformly at random, 'kmeans' clusters the least-squares
            spline coefficients of all genes
        reg_covar : float, optional (default=1e-6)
            Added to the diagonal of the class covariance matrices before
            they are inverted
        min_variance : float, optional (default=1e-6)
            Lower bound of the noise variance
        random_state : int or np.random.Generator, optional (default=None)
            Seed of the random initialization
        n_jobs : int, optional (default=1)
            Number of parallel jobs for the per-class computations
        verbose : bool, optional (default=True)
            Whether to print progress information
        """
        if n_classes < 1:
            raise InvalidInputError(f"n_classes must be positive, got {n_classes}")
        if not 0 < threshold < 1:
            raise InvalidInputError(f"threshold must be in (0, 1), got {threshold}")
        if max_iterations < 1 or min_iterations > max_iterations:
            raise InvalidInputError(
                f"Need 1 <= max_iterations and min_iterations <= max_iterations, "
                f"got {min_iterations} and {max_iterations}"
            )
        if n_control_points is not None and n_control_points < SPLINE_ORDER:
            raise InvalidInputError(
                f"n_control_points must be at least {SPLINE_ORDER}, got {n_control_points}"
            )
        if init_method not in ('random', 'kmeans'):
            raise InvalidInputError(f"Unknown init_method: {init_method}")

        self.n_classes = n_classes
        self.threshold = threshold
        self.min_iterations = min_iterations
        self.max_iterations = max_iterations
        self.n_control_points = n_control_points
        self.init_method = init_method
        self.reg_covar = reg_covar
        self.min_variance = min_variance
        self.random_state = random_state
        self.n_jobs = n_jobs
        self.verbose = verbose
        self.order = SPLINE_ORDER

        # Set by initialize()
        self.observations = None
        self.time_points = None
        self.gene_names = None
        self.control_points = None
        self.control_point_columns = None
        self.knots = None
        self.s_matrix = None
        self.sts = None
        self.rng = None

        # Set by fit()
        self.state = None
        self.results = None

    # ------------------------------------------------------------------
    # Fitting
    # ------------------------------------------------------------------

    def fit(self, data: Union[np.ndarray, pd.DataFrame],
            time_points: Sequence,
            gene_names: Optional[Sequence[Hashable]] = None) -> Dict:
        """
        Fit the model to the time series of all genes.

        Parameters:
        -----------
        data : np.ndarray or pd.DataFrame
            Either a matrix with shape (n_time_points, n_genes) or a table
            with one row per gene and one column per experiment
        time_points : sequence
            Time values or (time, label, signal_type) triples, in the order
            of the measurements
        gene_names : sequence, optional
            Names of the genes (matrix input only; a table uses its index)

        Returns:
        --------
        results : Dict
            Dictionary with the fitted parameters (see _build_results)
        """
        start_time = time.time()

        observations, times, names = self._prepare_input(data, time_points, gene_names)
        state = self.initialize(observations, times, names)

        with tqdm(total=self.max_iterations, desc="EM iterations", disable=not self.verbose) as pbar:
            while state.iteration < self.max_iterations:
                state = self.iterate(state)
                pbar.update(1)
                pbar.set_postfix(log_likelihood=f"{state.log_likelihood:.4f}")
                if self._has_converged(state):
                    state.converged = True
                    break

        state = self.assign_class_to_genes(state)

        if not state.converged:
            warnings.warn(
                f"EM algorithm did not converge within {self.max_iterations} iterations "
                f"(threshold={self.threshold}); returning the last parameters.",
                ConvergenceWarning
            )

        self.state = state
        self.results = self._build_results(state)

        if self.verbose:
            elapsed_time = time.time() - start_time
            print(f"Fitting completed in {elapsed_time:.2f} seconds after {state.iteration} iterations")
            print(f"Log-likelihood: {state.log_likelihood:.4f}, converged: {state.converged}")
            print(f"Class sizes: {np.bincount(state.gene2class, minlength=self.n_classes).tolist()}")

        return self.results

    def _prepare_input(self, data, time_points, gene_names):
        if isinstance(data, pd.DataFrame):
            if gene_names is not None:
                raise InvalidInputError(
                    "gene_names cannot be combined with a DataFrame; genes are named by its index"
                )
            observations, times, names = time_series_to_matrix(data, time_points)
            observations = validate_observations(observations)
        else:
            observations = validate_observations(data)
            times = extract_times(time_points)
            if gene_names is None:
                names = list(range(observations.shape[1]))
            else:
                names = list(gene_names)
                if len(names) != observations.shape[1]:
                    raise InvalidInputError(
                        f"Length of gene_names ({len(names)}) doesn't match the number of genes "
                        f"({observations.shape[1]})"
                    )

        times = validate_time_points(times, n_rows=observations.shape[0])

        n_genes = observations.shape[1]
        if self.n_classes > n_genes:
            raise InvalidInputError(
                f"Cannot build {self.n_classes} classes from {n_genes} genes"
            )
        return observations, times, names

    def initialize(self, observations: np.ndarray, time_points: np.ndarray,
                   gene_names: Optional[List[Hashable]] = None) -> FitState:
        """
        Set up the spline basis and the initial parameters of the EM algorithm.

        Parameters:
        -----------
        observations : np.ndarray
            Validated matrix with shape (n_time_points, n_genes)
        time_points : np.ndarray
            Validated, strictly increasing time points
        gene_names : list, optional
            Names of the genes

        Returns:
        --------
        state : FitState
            Initial parameters
        """
        self.rng = np.random.default_rng(self.random_state)
        self.observations = observations
        self.time_points = time_points
        self.gene_names = list(range(observations.shape[1])) if gene_names is None else gene_names
        n_time_points, n_genes = observations.shape
        n_classes = self.n_classes

        # Spline basis
        self.control_points, self.control_point_columns = choose_control_points(
            time_points, self.n_control_points, self.order
        )
        q = len(self.control_points)
        self.knots = place_knots(time_points[0], time_points[-1], q, self.order)
        self.s_matrix = basis_matrix(time_points, self.knots, q, self.order)
        self.sts = self.s_matrix.T @ self.s_matrix

        if np.linalg.matrix_rank(self.sts) < q:
            raise SingularModelError(
                f"The spline basis with {q} control points is rank deficient at the "
                f"{n_time_points} measured time points; use fewer control points"
            )

        # Least-squares spline coefficients of every gene, shape (n_genes, q)
        coefficients = (self._robust_inverse(self.sts) @ self.s_matrix.T @ observations).T

        if self.init_method == 'kmeans':
            kmeans = KMeans(n_clusters=n_classes, n_init=10,
                            random_state=int(self.rng.integers(2**31 - 1)))
            gene2class = kmeans.fit_predict(coefficients).astype(int)
            mu = kmeans.cluster_centers_.copy()
        else:
            chosen = self.rng.choice(n_genes, size=n_classes, replace=False)
            mu = coefficients[chosen].copy()
            gene2class = self.rng.integers(0, n_classes, size=n_genes)

        control_values = observations[self.control_point_columns]  # (q, n_genes)
        cov_matrices = np.stack([
            self._initial_covariance(control_values[:, gene2class == j]) for j in range(n_classes)
        ])
        inverse_cov_matrices = np.stack([self._inverse_covariance(c) for c in cov_matrices])

        gamma = np.stack([
            self.rng.multivariate_normal(np.zeros(q), cov_matrices[j], size=n_genes,
                                         check_valid='ignore')
            for j in range(n_classes)
        ])

        gene_variances = np.var(control_values, axis=0, ddof=1)
        variance = max(float(np.mean(gene_variances)), self.min_variance)

        if self.verbose:
            print(f"Initialized TimeFit with {n_genes} genes, {n_time_points} time points, "
                  f"{q} control points and {n_classes} classes ({self.init_method} initialization)")
            print(f"Control points: {np.round(self.control_points, 4).tolist()}")
            print(f"Initial variance: {variance:.6f}")

        return FitState(
            mu=mu,
            gamma=gamma,
            cov_matrices=cov_matrices,
            inverse_cov_matrices=inverse_cov_matrices,
            variance=variance,
            class_probs=np.full(n_classes, 1.0 / n_classes),
            gene_variances=gene_variances,
            gene2class=gene2class,
        )

    def _initial_covariance(self, values: np.ndarray) -> np.ndarray:
        """Sample covariance of the control-point values (q x n_class_genes)."""
        q = values.shape[0]
        if values.shape[1] < 2:
            return np.eye(q)
        return np.atleast_2d(np.cov(values))

    def _inverse_covariance(self, cov: np.ndarray) -> np.ndarray:
        return self._robust_inverse(cov + self.reg_covar * np.eye(cov.shape[0]))

    @staticmethod
    def _robust_inverse(matrix: np.ndarray) -> np.ndarray:
        """Pseudo-inverse via singular value decomposition."""
        try:
            return np.linalg.pinv(matrix)
        except np.linalg.LinAlgError as exc:
            raise SingularModelError(f"Matrix inversion failed: {exc}") from exc

    def _per_class(self, func: Callable[[int], np.ndarray], n_classes: int) -> List[np.ndarray]:
        # Map stage over classes; callers reduce the returned list
        if self.n_jobs != 1 and n_classes > 1:
            return Parallel(n_jobs=self.n_jobs, prefer="threads")(
                delayed(func)(j) for j in range(n_classes)
            )
        return [func(j) for j in range(n_classes)]

    def _residuals(self, state: FitState, j: int,
                   genes: Optional[np.ndarray] = None) -> np.ndarray:
        """Observed values minus the class-j model of each gene, shape (n_genes, n_time_points)."""
        if genes is None:
            genes = slice(None)
        coefficients = state.mu[j] + state.gamma[j][genes]
        return self.observations.T[genes] - coefficients @ self.s_matrix.T

    def _class_weights(self, state: FitState, j: int) -> Optional[np.ndarray]:
        """Responsibilities of class j normalized to sum to one, None for an empty class."""
        log_mass = logsumexp(state.log_probs[:, j])
        if not np.isfinite(log_mass):
            return None
        return np.exp(state.log_probs[:, j] - log_mass)

    # ------------------------------------------------------------------
    # EM phases
    # ------------------------------------------------------------------

    def iterate(self, state: FitState) -> FitState:
        """Run one E-step and one M-step."""
        state.iteration += 1
        state.previous_log_likelihood = state.log_likelihood

        state = self.compute_probabilities(state)
        state = self.find_map_estimate(state)
        state = self.maximize_variance(state)
        state = self.maximize_mu(state)
        state = self.maximize_cov_matrices(state)
        state = self.update_class_probs(state)
        state = self.compute_log_likelihood(state)

        state.log_likelihood_trace.append(state.log_likelihood)
        return state

    def compute_probabilities(self, state: FitState) -> FitState:
        """
        E-step: compute P(j|i), the probability that gene i belongs to class j.

        The unnormalized responsibilities
            classProb_j * exp(-|y_i - S(mu_j + gamma_ij)|^2 / variance)
                        * exp(-0.5 gamma_ij^T Gamma_j^-1 gamma_ij)
        routinely leave the double range, so they are normalized in log
        space. Genes without any finite factor get uniform responsibilities.
        """
        with np.errstate(divide='ignore'):
            log_class_probs = np.log(state.class_probs)

        def class_log_factors(j):
            residuals = self._residuals(state, j)
            e1 = -np.sum(residuals ** 2, axis=1) / state.variance
            g = state.gamma[j]
            e2 = -0.5 * np.einsum('gq,qr,gr->g', g, state.inverse_cov_matrices[j], g)
            return log_class_probs[j] + e1 + e2

        log_factors = np.column_stack(self._per_class(class_log_factors, state.n_classes))
        n_genes, n_classes = log_factors.shape

        invalid = np.isnan(log_factors) | np.isposinf(log_factors)
        degenerate = invalid.any(axis=1) | np.all(np.isneginf(log_factors), axis=1)
        valid = ~degenerate

        log_probs = np.full((n_genes, n_classes), -np.log(n_classes))
        if valid.any():
            rows = log_factors[valid]
            log_probs[valid] = rows - logsumexp(rows, axis=1, keepdims=True)

            # Genes whose plain double factors would overflow or all underflow
            largest = np.max(rows, axis=1)
            state.n_rescaled = int(np.sum((largest > _LOG_MAX) | (largest < _LOG_TINY)))
        else:
            state.n_rescaled = 0

        state.n_degenerate = int(degenerate.sum())
        if state.n_degenerate:
            warnings.warn(
                f"{state.n_degenerate} genes had no finite class responsibility in iteration "
                f"{state.iteration}; using uniform responsibilities for them.",
                NumericDegeneracyWarning
            )

        probs = np.exp(log_probs)
        probs /= probs.sum(axis=1, keepdims=True)

        state.log_probs = log_probs
        state.probs = probs
        return state

    def find_map_estimate(self, state: FitState) -> FitState:
        """
        M-step: MAP estimate of the gene deviations for every class,
            gamma_ij = (Gamma_j^-1 variance + S^T S)^-1 S^T (y_i - S mu_j)
        """
        def class_map_estimate(j):
            m1 = self._robust_inverse(state.inverse_cov_matrices[j] * state.variance + self.sts)
            centred = self.observations.T - state.mu[j] @ self.s_matrix.T  # (n_genes, n_time_points)
            return centred @ self.s_matrix @ m1.T

        state.gamma = np.stack(self._per_class(class_map_estimate, state.n_classes))
        return state

    def maximize_variance(self, state: FitState) -> FitState:
        """
        Re-estimate the noise variance as the responsibility-weighted sum of
        squared residuals plus trace(S (Gamma_j^-1 + S^T S / variance)^-1 S^T),
        divided by n_genes * n_time_points.
        """
        n_time_points, n_genes = self.observations.shape
        total = 0.0
        for j in range(state.n_classes):
            residuals = self._residuals(state, j)
            correction = self._robust_inverse(
                state.inverse_cov_matrices[j] + self.sts / state.variance
            )
            trace = np.trace(self.s_matrix @ correction @ self.s_matrix.T)
            total += np.sum(state.probs[:, j] * (np.sum(residuals ** 2, axis=1) + trace))

        variance = total / (n_genes * n_time_points)
        if not np.isfinite(variance):
            warnings.warn(
                f"Variance update is not finite in iteration {state.iteration}; keeping {state.variance}",
                NumericDegeneracyWarning
            )
            return state

        state.variance = max(float(variance), self.min_variance)
        return state

    def maximize_mu(self, state: FitState) -> FitState:
        """
        Re-estimate each class centre as the responsibility-weighted
        least-squares solution
            (sum_i P(j|i) S^T S) mu_j = sum_i P(j|i) S^T (y_i - S gamma_ij)
        """
        for j in range(state.n_classes):
            weights = self._class_weights(state, j)
            if weights is None:
                raise SingularModelError(
                    f"Class {j} has no responsibility mass, its centre cannot be estimated. "
                    f"Restart with a different initialization or fewer classes."
                )
            targets = self.observations.T - state.gamma[j] @ self.s_matrix.T
            rhs = self.s_matrix.T @ (weights @ targets)
            try:
                mu = np.linalg.solve(self.sts, rhs)
            except np.linalg.LinAlgError as exc:
                raise SingularModelError(f"Centre system of class {j} is singular: {exc}") from exc
            if not np.all(np.isfinite(mu)):
                raise SingularModelError(f"Centre of class {j} is not finite")
            state.mu[j] = mu
        return state

    def maximize_cov_matrices(self, state: FitState) -> FitState:
        """
        Re-estimate each class covariance as
            sum_i P(j|i) (gamma_ij gamma_ij^T + (Gamma_j^-1 + S^T S / variance)^-1) / sum_i P(j|i)
        and recompute its inverse.
        """
        for j in range(state.n_classes):
            weights = self._class_weights(state, j)
            if weights is None:
                continue
            correction = self._robust_inverse(
                state.inverse_cov_matrices[j] + self.sts / state.variance
            )
            g = state.gamma[j]
            cov = np.einsum('g,gq,gr->qr', weights, g, g) + correction
            cov = 0.5 * (cov + cov.T)
            state.cov_matrices[j] = cov
            state.inverse_cov_matrices[j] = self._inverse_covariance(cov)
        return state

    def update_class_probs(self, state: FitState) -> FitState:
        """Set each class probability to the mean responsibility of the class."""
        state.class_probs = state.probs.mean(axis=0)
        return state

    def compute_log_likelihood(self, state: FitState) -> FitState:
        """
        Log-likelihood of the data, assigning every gene to its most probable
        class:
            sum_i -n/2 log(variance) - |r_i|^2 / (2 variance)
                  - 1/2 log|Gamma_j| - 1/2 gamma_ij^T Gamma_j^-1 gamma_ij
        """
        n_time_points = self.observations.shape[0]
        best = np.argmax(state.probs, axis=1)
        log_likelihood = 0.0
        for j in np.unique(best):
            genes = np.flatnonzero(best == j)
            residuals = self._residuals(state, j, genes)
            g = state.gamma[j][genes]
            quad = np.einsum('gq,qr,gr->g', g, state.inverse_cov_matrices[j], g)
            log_det = self._log_pseudo_determinant(state.cov_matrices[j])
            log_likelihood += np.sum(
                -0.5 * n_time_points * np.log(state.variance)
                - np.sum(residuals ** 2, axis=1) / (2 * state.variance)
                - 0.5 * log_det
                - 0.5 * quad
            )
        state.log_likelihood = float(log_likelihood)
        return state

    def _log_pseudo_determinant(self, cov: np.ndarray) -> float:
        eigenvalues = np.linalg.eigvalsh(cov + self.reg_covar * np.eye(cov.shape[0]))
        eigenvalues = eigenvalues[eigenvalues > np.finfo(np.float64).tiny]
        return float(np.sum(np.log(eigenvalues)))

    def _has_converged(self, state: FitState) -> bool:
        if state.iteration < self.min_iterations:
            return False
        previous = state.previous_log_likelihood
        if not np.isfinite(previous) or not np.isfinite(state.log_likelihood):
            return False
        if previous == 0:
            return state.log_likelihood == 0
        return state.log_likelihood / previous >= 1 - self.threshold

    def assign_class_to_genes(self, state: FitState) -> FitState:
        """Assign every gene to its most probable class (lowest index on ties)."""
        state.gene2class = np.argmax(state.probs, axis=1)
        return state

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def _build_results(self, state: FitState) -> Dict:
        genes = np.arange(state.n_genes)
        return {
            'gene_names': list(self.gene_names),
            'gene2class': state.gene2class.copy(),
            'class_centers': state.mu.copy(),
            'gene_deviations': state.gamma[state.gene2class, genes].copy(),
            'cov_matrices': state.cov_matrices.copy(),
            'class_probs': state.class_probs.copy(),
            'probabilities': state.probs.copy(),
            'variance': state.variance,
            'knots': self.knots.copy(),
            'control_points': self.control_points.copy(),
            'control_point_columns': self.control_point_columns.copy(),
            'log_likelihood': state.log_likelihood,
            'log_likelihood_trace': list(state.log_likelihood_trace),
            'n_iterations': state.iteration,
            'converged': state.converged,
        }

    def _check_fitted(self):
        if self.state is None:
            raise ValueError("No model has been fitted yet")

    def _gene_index(self, gene: Union[int, Hashable]) -> int:
        if gene in self.gene_names:
            return self.gene_names.index(gene)
        if isinstance(gene, (int, np.integer)) and 0 <= gene < len(self.gene_names):
            return int(gene)
        raise KeyError(f"Gene {gene!r} not found")

    def get_gene_model(self, gene: Union[int, Hashable]) -> GeneCurve:
        """
        Get the continuous model of a gene.

        Parameters:
        -----------
        gene : int or hashable
            Gene name, or column index in the observation matrix

        Returns:
        --------
        GeneCurve
            Curve built from the centre of the gene's class and its deviation
        """
        self._check_fitted()
        idx = self._gene_index(gene)
        j = int(self.state.gene2class[idx])
        return GeneCurve(
            class_center=self.state.mu[j],
            gene_deviation=self.state.gamma[j, idx],
            knots=self.knots,
            control_points=self.control_points,
            order=self.order,
            time_points=self.time_points,
            observations=self.observations[:, idx],
            gene_class=j,
            gene_name=self.gene_names[idx],
        )

    def evaluate(self, gene: Union[int, Hashable], t: float) -> float:
        """Value of the fitted model of a gene at time t."""
        return self.get_gene_model(gene).evaluate(t)

    def predict(self, time_points: Optional[Sequence[float]] = None) -> np.ndarray:
        """
        Evaluate the fitted curves of all genes.

        Parameters:
        -----------
        time_points : array-like, optional
            Time points at which to evaluate. If None, uses the measured time points.

        Returns:
        --------
        predictions : np.ndarray
            Matrix with shape (n_time_points, n_genes)
        """
        self._check_fitted()
        if time_points is None:
            time_points = self.time_points
        basis = basis_matrix(time_points, self.knots, len(self.control_points), self.order)
        genes = np.arange(self.state.n_genes)
        coefficients = self.state.mu[self.state.gene2class] + self.state.gamma[self.state.gene2class, genes]
        return basis @ coefficients.T

    def class_center_curves(self, time_points: Optional[Sequence[float]] = None) -> np.ndarray:
        """Class centre curves with shape (n_time_points, n_classes)."""
        self._check_fitted()
        if time_points is None:
            time_points = self.time_points
        basis = basis_matrix(time_points, self.knots, len(self.control_points), self.order)
        return basis @ self.state.mu.T

    def get_class_assignments(self) -> pd.DataFrame:
        """
        Table of the final class of every gene.

        Returns:
        --------
        pd.DataFrame
            Indexed by gene, with the assigned class, its posterior
            probability and one probability column per class
        """
        self._check_fitted()
        probs = self.state.probs
        genes = np.arange(self.state.n_genes)
        table = pd.DataFrame(
            probs,
            index=pd.Index(self.gene_names, name='gene'),
            columns=[f"prob_class_{j}" for j in range(probs.shape[1])]
        )
        table.insert(0, 'posterior', probs[genes, self.state.gene2class])
        table.insert(0, 'class', self.state.gene2class)
        return table

    def plot_gene_curves(self, gene_indices: Optional[List[int]] = None, **kwargs):
        """Wrapper around visualization.plot_gene_curves."""
        from .visualization import plot_gene_curves as viz_func
        return viz_func(fitter=self, gene_indices=gene_indices, **kwargs)

    def plot_class_centers(self, **kwargs):
        """Wrapper around visualization.plot_class_centers."""
        from .visualization import plot_class_centers as viz_func
        return viz_func(fitter=self, **kwargs)
