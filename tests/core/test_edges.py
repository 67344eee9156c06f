import numpy as np
import pytest
from scipy import sparse

import roiclust.config as config
from roiclust.core import EdgeSequence, sorted_edges
from roiclust.exceptions import DimensionMismatchError


@pytest.mark.required
class TestSortedEdges:
    def test_ascending_upper_triangle(self, symmetric):
        d = symmetric(4, {(0, 1): 3.0, (2, 3): 1.0, (1, 3): 2.0})
        edges = list(sorted_edges(d))
        assert edges == [(2, 3, 1.0), (1, 3, 2.0), (0, 1, 3.0)]

    def test_never_reads_lower_triangle_or_diagonal(self):
        d = sparse.csc_matrix(np.array([[9.0, 0.0, 0.0], [4.0, 9.0, 0.0], [5.0, 6.0, 9.0]]))
        assert len(sorted_edges(d)) == 0

    def test_asymmetric_reads_upper_only(self):
        d = np.array([[0.0, 2.0, 0.0], [7.0, 0.0, 1.0], [8.0, 9.0, 0.0]])
        assert [(i, j) for i, j, _ in sorted_edges(d)] == [(1, 2), (0, 1)]

    def test_random_properties(self, random_problem):
        d, _ = random_problem(30)
        seq = sorted_edges(d)
        edges = list(seq)
        assert all(i < j for i, j, _ in edges)
        distances = [dist for _, _, dist in edges]
        assert distances == sorted(distances)
        upper = sparse.triu(d, k=1).tocoo()
        expected = sorted(zip(upper.row.tolist(), upper.col.tolist()))
        assert sorted((i, j) for i, j, _ in edges) == expected
        assert len(seq) == len(expected)

    def test_ties_keep_column_major_order(self, symmetric):
        d = symmetric(4, {(1, 2): 1.0, (0, 3): 1.0, (0, 1): 1.0, (2, 3): 1.0})
        assert [(i, j) for i, j, _ in sorted_edges(d)] == [(0, 1), (1, 2), (0, 3), (2, 3)]

    def test_deterministic(self, random_problem):
        d, _ = random_problem(25)
        first = sorted_edges(d)
        second = sorted_edges(d.copy())
        np.testing.assert_array_equal(first.rows, second.rows)
        np.testing.assert_array_equal(first.cols, second.cols)
        np.testing.assert_array_equal(first.distances, second.distances)

    def test_one_shot(self, symmetric):
        seq = sorted_edges(symmetric(3, {(0, 1): 1.0}))
        assert not seq.consumed
        assert list(seq) == [(0, 1, 1.0)]
        assert seq.consumed
        with pytest.raises(RuntimeError):
            iter(seq)

    def test_lazy(self, symmetric):
        seq = sorted_edges(symmetric(3, {(0, 1): 1.0, (1, 2): 2.0}))
        it = iter(seq)
        assert next(it) == (0, 1, 1.0)
        assert next(it) == (1, 2, 2.0)
        with pytest.raises(StopIteration):
            next(it)

    def test_returns_edge_sequence(self, symmetric):
        seq = sorted_edges(symmetric(5, {(0, 4): 1.0}))
        assert isinstance(seq, EdgeSequence)
        assert seq.n == 5

    @pytest.mark.parametrize("shape", [(2, 3), (3, 2), (1, 4)])
    def test_not_square(self, shape):
        with pytest.raises(DimensionMismatchError):
            sorted_edges(np.ones(shape))

    def test_not_square_sparse(self):
        with pytest.raises(DimensionMismatchError):
            sorted_edges(sparse.csc_matrix((3, 4)))

    def test_not_2d(self):
        with pytest.raises(DimensionMismatchError):
            sorted_edges(np.ones(4))

    def test_nested_sequences(self):
        assert list(sorted_edges([[0, 2], [2, 0]])) == [(0, 1, 2.0)]

    @pytest.mark.parametrize("use_sparse", [True, False])
    def test_nan_distance(self, symmetric, use_sparse):
        with pytest.raises(ValueError, match="NaN"):
            sorted_edges(symmetric(3, {(0, 1): np.nan, (1, 2): 1.0}), use_sparse=use_sparse)

    def test_nan_distance_dense(self):
        with pytest.raises(ValueError, match="NaN"):
            sorted_edges(np.array([[0.0, np.nan], [np.nan, 0.0]]))

    def test_negative_distance(self, symmetric):
        with pytest.raises(ValueError, match="non-negative"):
            sorted_edges(symmetric(3, {(0, 1): -1.0}))


@pytest.mark.required
class TestExplicitZeros:
    @staticmethod
    def _with_explicit_zero():
        d = sparse.csc_matrix(([0.0, 0.0, 3.0, 3.0], ([0, 1, 1, 2], [1, 0, 2, 1])), shape=(3, 3))
        assert d.nnz == 4
        return d

    def test_explicit_zero_is_edge(self):
        edges = list(sorted_edges(self._with_explicit_zero()))
        assert edges == [(0, 1, 0.0), (1, 2, 3.0)]

    def test_explicit_zero_absent(self):
        config.set_explicit_zeros("absent")
        edges = list(sorted_edges(self._with_explicit_zero()))
        assert edges == [(1, 2, 3.0)]

    def test_explicit_zero_dense(self):
        edges = list(sorted_edges(self._with_explicit_zero(), use_sparse=False))
        assert edges == [(1, 2, 3.0)]

    def test_context_manager(self):
        with config.use_explicit_zeros("absent"):
            assert len(sorted_edges(self._with_explicit_zero())) == 1
        assert len(sorted_edges(self._with_explicit_zero())) == 2
