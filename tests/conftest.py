from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest
from scipy import sparse

import roiclust.config as config


def _symmetric(n: int, entries: dict[tuple[int, int], float]) -> sparse.csc_matrix:
    rows, cols, data = [], [], []
    for (i, j), value in entries.items():
        rows += [i, j]
        cols += [j, i]
        data += [value, value]
    return sparse.csc_matrix((data, (rows, cols)), shape=(n, n))


@pytest.fixture(autouse=True)
def reset_config():
    yield
    config.set_explicit_zeros(None)


@pytest.fixture(scope="session")
def RNG():
    return np.random.default_rng(0)


@pytest.fixture(scope="session")
def symmetric() -> Callable[[int, dict[tuple[int, int], float]], sparse.csc_matrix]:
    """Builds a symmetric sparse distance matrix from upper triangle entries."""
    return _symmetric


@pytest.fixture(scope="session")
def random_problem(RNG):
    """Builds a random sparse distance matrix with random per-entity timepoints."""

    def _random_problem(n: int, n_timepoints: int = 5, n_edges: int = 40):
        entries = {}
        for _ in range(n_edges):
            i, j = sorted(RNG.choice(n, size=2, replace=False).tolist())
            entries[(i, j)] = float(RNG.integers(1, 20))
        timepoints = [
            set(RNG.choice(n_timepoints, size=int(RNG.integers(0, 3)), replace=False).tolist()) for _ in range(n)
        ]
        return _symmetric(n, entries), timepoints

    return _random_problem


@pytest.fixture
def two_pairs():
    """Four entities at distinct timepoints forming two pairs below a height of 3."""
    distances = _symmetric(4, {(0, 1): 1.0, (2, 3): 2.0, (0, 2): 5.0})
    timepoints = {0: {0}, 1: {1}, 2: {2}, 3: {3}}
    return distances, timepoints


@pytest.fixture
def same_timepoint():
    """Three entities all observed at the same single timepoint."""
    distances = _symmetric(3, {(0, 1): 1.0})
    timepoints = [[0], [0], [0]]
    return distances, timepoints


@pytest.fixture
def triangle():
    """Three entities pairwise connected with distinct distances."""
    distances = _symmetric(3, {(0, 1): 1.0, (0, 2): 2.0, (1, 2): 1.5})
    timepoints = [[0], [1], [2]]
    return distances, timepoints
