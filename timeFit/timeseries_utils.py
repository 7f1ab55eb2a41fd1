#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Time Series Utility Functions

This module provides helpers to bring expression time series into the form
used by the model fitter: time point descriptors, conversion of a gene by
experiment table into an observation matrix, input validation and a
generator of synthetic test data.
"""

from collections import namedtuple
from typing import Hashable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import InvalidInputError

# A measured time point: time value, experiment label and signal type
TimePoint = namedtuple("TimePoint", ["time", "label", "signal_type"])

MIN_TIME_POINTS = 4


def extract_times(time_points: Sequence[Union[float, TimePoint, tuple]]) -> np.ndarray:
    """
    Get the time values of a list of time points.

    Parameters
    ----------
    time_points : sequence
        Either plain numbers or (time, label, signal_type) triples

    Returns
    -------
    np.ndarray
        Time values in the given order
    """
    times = []
    for tp in time_points:
        value = tp[0] if isinstance(tp, (tuple, list)) else tp
        try:
            times.append(float(value))
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Invalid time point: {tp!r}") from exc
    return np.array(times, dtype=np.float64)


def validate_time_points(times: Sequence[float], n_rows: Optional[int] = None) -> np.ndarray:
    """
    Check that time points are finite, strictly increasing and match the data.

    Parameters
    ----------
    times : array-like
        Time values
    n_rows : int, optional
        Number of rows (time points) of the observation matrix

    Returns
    -------
    np.ndarray
        The validated time points as float array
    """
    times = np.asarray(times, dtype=np.float64)
    if times.ndim != 1:
        raise InvalidInputError(f"Time points must be one-dimensional, got shape {times.shape}")
    if len(times) < MIN_TIME_POINTS:
        raise InvalidInputError(f"At least {MIN_TIME_POINTS} time points are needed, got {len(times)}")
    if not np.all(np.isfinite(times)):
        raise InvalidInputError("Time points must be finite")
    if np.any(np.diff(times) <= 0):
        raise InvalidInputError("Time points must be strictly increasing")
    if n_rows is not None and len(times) != n_rows:
        raise InvalidInputError(
            f"Number of time points ({len(times)}) doesn't match the number of rows "
            f"of the observation matrix ({n_rows})"
        )
    return times


def validate_observations(data: np.ndarray) -> np.ndarray:
    """
    Check the observation matrix (rows = time points, columns = genes).

    Returns
    -------
    np.ndarray
        A read-only float copy of the matrix
    """
    try:
        matrix = np.array(data, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Observation matrix must be numeric: {exc}") from exc

    if matrix.ndim != 2:
        raise InvalidInputError(f"Observation matrix must be 2D, got shape {matrix.shape}")
    if matrix.shape[1] == 0:
        raise InvalidInputError("Observation matrix contains no genes")
    if not np.all(np.isfinite(matrix)):
        raise InvalidInputError("Observation matrix contains NaN or infinite values")

    matrix.setflags(write=False)
    return matrix


def time_series_to_matrix(data: pd.DataFrame,
                          time_points: Sequence[Union[float, TimePoint, tuple]]
                          ) -> Tuple[np.ndarray, np.ndarray, List[Hashable]]:
    """
    Transcribe a gene by experiment table into an observation matrix.

    Parameters
    ----------
    data : pd.DataFrame
        One row per gene, one column per experiment. Columns may be a
        MultiIndex of (label, signal_type).
    time_points : sequence
        (time, label, signal_type) triples selecting the columns in time
        order, or plain time values matching the columns in their order.

    Returns
    -------
    observations : np.ndarray
        Matrix of shape (n_time_points, n_genes)
    times : np.ndarray
        Time values
    gene_names : list
        Row labels of data
    """
    times = extract_times(time_points)

    if all(isinstance(tp, (tuple, list)) for tp in time_points):
        if isinstance(data.columns, pd.MultiIndex):
            columns = [(tp[1], tp[2]) for tp in time_points]
        else:
            columns = [tp[1] for tp in time_points]
        missing = [c for c in columns if c not in data.columns]
        if missing:
            raise InvalidInputError(f"Experiments not found in data: {missing}")
        values = data.loc[:, columns]
    else:
        if len(times) != data.shape[1]:
            raise InvalidInputError(
                f"Number of time points ({len(times)}) doesn't match the number of "
                f"experiments ({data.shape[1]})"
            )
        values = data

    try:
        observations = values.to_numpy(dtype=np.float64).T
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Expression values must be numeric: {exc}") from exc

    return observations, times, list(data.index)


def sample_test_data(n_genes: int, n_experiments: int, n_classes: int,
                     random_state: Optional[Union[int, np.random.Generator]] = None,
                     mean_range: Tuple[float, float] = (-0.5, 0.5),
                     sd_range: Tuple[float, float] = (0.005, 0.01)) -> Tuple[np.ndarray, np.ndarray]:
    """
    Generate synthetic expression time series with a known class structure.

    Each class gets a random mean and standard deviation per experiment;
    every gene picks a random class and is sampled around its class means.

    Parameters
    ----------
    n_genes : int
        Number of genes
    n_experiments : int
        Number of measured time points
    n_classes : int
        Number of classes
    random_state : int or np.random.Generator, optional
        Seed or generator for reproducible data
    mean_range : tuple, default=(-0.5, 0.5)
        Range of the class means
    sd_range : tuple, default=(0.005, 0.01)
        Range of the class standard deviations

    Returns
    -------
    data : np.ndarray
        Matrix of shape (n_experiments, n_genes)
    labels : np.ndarray
        True class of each gene
    """
    rng = np.random.default_rng(random_state)
    means = rng.uniform(mean_range[0], mean_range[1], size=(n_classes, n_experiments))
    sds = rng.uniform(sd_range[0], sd_range[1], size=(n_classes, n_experiments))

    labels = rng.integers(0, n_classes, size=n_genes)
    noise = rng.standard_normal(size=(n_genes, n_experiments))
    data = means[labels] + noise * sds[labels]

    return data.T, labels
