import numpy as np
import pandas as pd
import pytest

from timeFit.exceptions import InvalidInputError
from timeFit.timeseries_utils import (
    TimePoint,
    extract_times,
    sample_test_data,
    time_series_to_matrix,
    validate_observations,
    validate_time_points,
)


def test_extract_times_from_triples_and_numbers():
    time_points = [TimePoint(0.0, "a", "ratio"), (1.5, "b", "ratio"), 3]
    np.testing.assert_array_equal(extract_times(time_points), [0.0, 1.5, 3.0])


def test_extract_times_rejects_non_numeric():
    with pytest.raises(InvalidInputError):
        extract_times(["zero", "one", "two"])


@pytest.mark.parametrize("times", [
    [0.0, 1.0],
    [0.0, 1.0, 2.0],
    [0.0, 2.0, 1.0, 3.0],
    [0.0, 1.0, 1.0, 2.0],
    [0.0, np.nan, 2.0, 3.0],
    [[0.0, 1.0, 2.0, 3.0]],
])
def test_invalid_time_points(times):
    with pytest.raises(InvalidInputError):
        validate_time_points(times)


def test_time_points_must_match_rows():
    with pytest.raises(InvalidInputError):
        validate_time_points([0.0, 1.0, 2.0, 3.0], n_rows=5)
    np.testing.assert_array_equal(validate_time_points([0, 1, 2, 3], n_rows=4), [0.0, 1.0, 2.0, 3.0])


def test_validate_observations_returns_read_only_copy():
    data = np.arange(6).reshape(3, 2)
    matrix = validate_observations(data)
    assert matrix.dtype == np.float64
    with pytest.raises(ValueError):
        matrix[0, 0] = 1.0
    data[0, 0] = 99
    assert matrix[0, 0] == 0.0


@pytest.mark.parametrize("data", [
    np.zeros(4),
    np.zeros((4, 0)),
    np.array([[0.0, np.inf], [1.0, 2.0]]),
    [["a", "b"], ["c", "d"]],
])
def test_invalid_observations(data):
    with pytest.raises(InvalidInputError):
        validate_observations(data)


def test_time_series_to_matrix_selects_labelled_columns():
    table = pd.DataFrame(
        [[1.0, 2.0, 3.0, 9.0], [4.0, 5.0, 6.0, 9.0]],
        index=["g1", "g2"],
        columns=["t2", "t0", "t1", "unused"],
    )
    time_points = [TimePoint(0.0, "t0", "ratio"), TimePoint(1.0, "t1", "ratio"),
                   TimePoint(2.0, "t2", "ratio")]
    observations, times, genes = time_series_to_matrix(table, time_points)

    np.testing.assert_array_equal(observations, [[2.0, 5.0], [3.0, 6.0], [1.0, 4.0]])
    np.testing.assert_array_equal(times, [0.0, 1.0, 2.0])
    assert genes == ["g1", "g2"]


def test_time_series_to_matrix_with_signal_types():
    columns = pd.MultiIndex.from_tuples([("t0", "ratio"), ("t0", "intensity"),
                                         ("t1", "ratio"), ("t2", "ratio")])
    table = pd.DataFrame([[1.0, 100.0, 2.0, 3.0]], index=["g1"], columns=columns)
    time_points = [(0.0, "t0", "ratio"), (1.0, "t1", "ratio"), (2.0, "t2", "ratio")]
    observations, _, _ = time_series_to_matrix(table, time_points)
    np.testing.assert_array_equal(observations[:, 0], [1.0, 2.0, 3.0])


def test_time_series_to_matrix_missing_experiment():
    table = pd.DataFrame([[1.0, 2.0, 3.0]], columns=["a", "b", "c"])
    with pytest.raises(InvalidInputError):
        time_series_to_matrix(table, [(0.0, "a", "x"), (1.0, "b", "x"), (2.0, "d", "x")])


def test_time_series_to_matrix_plain_times_use_column_order():
    table = pd.DataFrame([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]], columns=["a", "b", "c"])
    observations, times, genes = time_series_to_matrix(table, [0.0, 1.0, 2.0])
    assert observations.shape == (3, 2)
    np.testing.assert_array_equal(observations[:, 1], [4.0, 5.0, 6.0])
    assert genes == [0, 1]

    with pytest.raises(InvalidInputError):
        time_series_to_matrix(table, [0.0, 1.0])


def test_sample_test_data_shapes_and_ranges():
    data, labels = sample_test_data(50, 8, 3, random_state=1)
    assert data.shape == (8, 50)
    assert labels.shape == (50,)
    assert set(labels) <= {0, 1, 2}
    # Class spread is tiny compared to the range of class means
    assert np.all(np.abs(data) < 0.6)


def test_sample_test_data_is_reproducible():
    first, _ = sample_test_data(10, 5, 2, random_state=7)
    second, _ = sample_test_data(10, 5, 2, random_state=7)
    np.testing.assert_array_equal(first, second)


def test_genes_of_a_class_are_close():
    data, labels = sample_test_data(40, 6, 2, random_state=3, sd_range=(0.001, 0.002))
    for label in np.unique(labels):
        members = data[:, labels == label]
        assert np.all(members.std(axis=1) < 0.01)
