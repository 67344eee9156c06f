import numpy as np
import pytest

from roiclust.core import DisjointSet
from roiclust.exceptions import InvalidSizeError, OutOfRangeError


@pytest.mark.required
class TestDisjointSet:
    def test_create_singletons(self):
        ds = DisjointSet.create(5)
        assert len(ds) == 5
        assert ds.n_sets == 5
        assert [ds.find(x) for x in range(5)] == [0, 1, 2, 3, 4]

    def test_create_empty(self):
        ds = DisjointSet.create(0)
        assert len(ds) == 0
        assert ds.n_sets == 0
        assert ds.roots().size == 0

    def test_create_negative(self):
        with pytest.raises(InvalidSizeError):
            DisjointSet.create(-1)

    @pytest.mark.parametrize("x", [-1, 5, 100, 2.7, 2.0, "2", None])
    def test_find_out_of_range(self, x):
        ds = DisjointSet.create(5)
        with pytest.raises(OutOfRangeError):
            ds.find(x)

    def test_union_out_of_range(self):
        ds = DisjointSet.create(3)
        with pytest.raises(OutOfRangeError):
            ds.union(0, 3)
        assert ds.n_sets == 3

    def test_numpy_integer_index(self):
        ds = DisjointSet.create(5)
        root = ds.union(np.int64(2), np.int32(3))
        assert ds.find(np.int64(3)) == root

    def test_union_non_integer(self):
        ds = DisjointSet.create(5)
        with pytest.raises(OutOfRangeError):
            ds.union(2, 3.0)
        assert ds.n_sets == 5

    def test_union_returns_root(self):
        ds = DisjointSet.create(4)
        root = ds.union(0, 1)
        assert root in (0, 1)
        assert ds.find(0) == ds.find(1) == root

    def test_union_same_set_is_noop(self):
        ds = DisjointSet.create(4)
        root = ds.union(0, 1)
        rank = ds.rank.copy()
        parent = ds.parent.copy()
        assert ds.union(1, 0) == root
        np.testing.assert_array_equal(ds.rank, rank)
        np.testing.assert_array_equal(ds.parent, parent)

    def test_union_by_rank_attaches_lower_rank(self):
        ds = DisjointSet.create(5)
        big = ds.union(0, 1)
        assert ds.rank[big] == 1
        # a singleton is attached below the deeper tree
        assert ds.union(2, big) == big
        assert ds.union(big, 3) == big
        assert ds.rank[big] == 1

    def test_union_equal_rank_increments(self):
        ds = DisjointSet.create(4)
        a = ds.union(0, 1)
        b = ds.union(2, 3)
        root = ds.union(a, b)
        assert root in (a, b)
        assert ds.rank[root] == 2

    def test_union_accepts_roots_and_members(self):
        left = DisjointSet.create(6)
        right = DisjointSet.create(6)
        for ds in (left, right):
            ds.union(0, 1)
            ds.union(2, 3)
        left.union(1, 3)
        right.union(right.find(1), right.find(3))
        np.testing.assert_array_equal(left.roots(), right.roots())

    def test_find_idempotent(self):
        ds = DisjointSet.create(6)
        ds.union(0, 1)
        ds.union(1, 2)
        ds.union(4, 5)
        for x in range(6):
            assert ds.find(ds.find(x)) == ds.find(x)

    def test_find_compresses_path(self):
        ds = DisjointSet.create(6)
        # build a chain 5 -> 4 -> 3 -> 2 -> 1 -> 0 by hand
        ds.parent[1:] = np.arange(5)
        assert ds.find(5) == 0
        np.testing.assert_array_equal(ds.parent, np.zeros(6, dtype=np.int64))

    def test_find_long_chain(self):
        n = 200_000
        ds = DisjointSet.create(n)
        ds.parent[1:] = np.arange(n - 1)
        assert ds.find(n - 1) == 0
        assert ds.parent[n - 1] == 0

    def test_connected(self):
        ds = DisjointSet.create(4)
        ds.union(0, 2)
        assert ds.connected(0, 2)
        assert ds.connected(2, 2)
        assert not ds.connected(0, 1)

    def test_random_unions_match_components(self, RNG):
        n = 50
        ds = DisjointSet.create(n)
        labels = np.arange(n)
        for _ in range(30):
            x, y = RNG.integers(0, n, size=2).tolist()
            ds.union(x, y)
            labels[labels == labels[y]] = labels[x]
        roots = ds.roots()
        for x in range(n):
            for y in range(n):
                assert (roots[x] == roots[y]) == (labels[x] == labels[y])
        assert ds.n_sets == np.unique(labels).size

    def test_repr(self):
        ds = DisjointSet.create(3)
        ds.union(0, 1)
        assert repr(ds) == "DisjointSet(n=3, n_sets=2)"
