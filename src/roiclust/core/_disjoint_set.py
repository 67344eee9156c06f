"""Disjoint set (union-find) data structure with Numba JIT compilation.

The compiled kernels operate on a ``(parent, rank)`` tuple of int64 arrays.
:class:`DisjointSet` owns such a tuple, validates indices and delegates to
the kernels.
"""

from __future__ import annotations

__all__ = ["DisjointSet"]

import operator

import numba
import numpy as np
from numpy.typing import NDArray

from roiclust.exceptions import InvalidSizeError, OutOfRangeError


@numba.njit(cache=True)
def ds_create(n_elements: np.int64) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """
    Create a new disjoint set data structure for n_elements.

    Parameters
    ----------
    n_elements : np.int64
        The number of elements in the disjoint set

    Returns
    -------
    tuple[NDArray[np.int64], NDArray[np.int64]]
        Tuple of (parent, rank) arrays where:
        - parent[i] = i initially (each element is its own parent/root)
        - rank[i] = 0 initially (all trees have height 0)
    """
    parent = np.arange(n_elements, dtype=np.int64)
    rank = np.zeros(n_elements, dtype=np.int64)
    return (parent, rank)


@numba.njit(cache=True)
def ds_find(disjoint_set: tuple[NDArray[np.int64], NDArray[np.int64]], x: np.int64) -> np.int64:
    """
    Find the root of the set containing element x with full path compression.

    The first pass walks up to the root, the second pass walks the same path
    again and points every visited node directly at the root. Both passes are
    loops, so chain depth never grows the call stack.

    Parameters
    ----------
    disjoint_set : tuple[NDArray[np.int64], NDArray[np.int64]]
        Tuple of (parent, rank) arrays representing the disjoint set forest.
    x : np.int64
        The element whose set root we want to find

    Returns
    -------
    np.int64
        The root element of the set containing x
    """
    parent = disjoint_set[0]
    root = x
    while parent[root] != root:
        root = parent[root]
    while parent[x] != root:
        nxt = parent[x]
        parent[x] = root
        x = nxt
    return root


@numba.njit(cache=True)
def ds_union_by_rank(
    disjoint_set: tuple[NDArray[np.int64], NDArray[np.int64]], point: np.int64, nbr: np.int64
) -> np.int64:
    """
    Perform union-by-rank on two points in a disjoint set data structure.

    The root with the smaller rank is attached under the root with the larger
    rank. On equal ranks the root of `point` survives and its rank grows by one.
    This function modifies disjoint_set in-place.

    Parameters
    ----------
    disjoint_set : tuple[NDArray[np.int64], NDArray[np.int64]]
        Tuple of (parent, rank) arrays representing the disjoint set forest.
    point : int
        Index of the first point to union
    nbr : int
        Index of the second point (neighbor) to union

    Returns
    -------
    np.int64
        The root of the merged set. When both points already share a set this
        is their common root and nothing is modified.
    """
    x = ds_find(disjoint_set, point)
    y = ds_find(disjoint_set, nbr)

    if x == y:
        return x

    if disjoint_set[1][x] < disjoint_set[1][y]:
        x, y = y, x

    disjoint_set[0][y] = x
    if disjoint_set[1][x] == disjoint_set[1][y]:
        disjoint_set[1][x] += 1
    return x


class DisjointSet:
    """
    A union-find forest over ``n`` elements with path compression and union by rank.

    Parameters
    ----------
    n : int
        Number of elements. Every element starts out as its own singleton set.

    Raises
    ------
    InvalidSizeError
        If `n` is negative.

    Examples
    --------
    >>> ds = DisjointSet.create(5)
    >>> root = ds.union(0, 1)
    >>> ds.find(1) == ds.find(0) == root
    True
    >>> ds.n_sets
    4
    """

    def __init__(self, n: int) -> None:
        if n < 0:
            raise InvalidSizeError(f"Disjoint set size must be non-negative; got {n}.")
        self._sets = ds_create(np.int64(n))

    @classmethod
    def create(cls, n: int) -> DisjointSet:
        """Returns a new :class:`DisjointSet` with `n` singleton subsets."""
        return cls(n)

    @property
    def parent(self) -> NDArray[np.int64]:
        """Parent pointer of every element, roots point at themselves."""
        return self._sets[0]

    @property
    def rank(self) -> NDArray[np.int64]:
        """Upper bound on the depth of the tree under every root."""
        return self._sets[1]

    def __len__(self) -> int:
        return self._sets[0].size

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n={len(self)}, n_sets={self.n_sets})"

    def _check(self, x: int) -> np.int64:
        try:
            index = operator.index(x)
        except TypeError as e:
            raise OutOfRangeError(f"Element {x!r} is not an integer index.") from e
        if not 0 <= index < len(self):
            raise OutOfRangeError(f"Element {index} is outside of the disjoint set range [0, {len(self)}).")
        return np.int64(index)

    def find(self, x: int) -> int:
        """
        Returns the root of the set containing `x`.

        Raises
        ------
        OutOfRangeError
            If `x` is not an element of the set.
        """
        return int(ds_find(self._sets, self._check(x)))

    def union(self, x: int, y: int) -> int:
        """
        Merges the sets containing `x` and `y` and returns the surviving root.

        Both elements and already resolved roots are accepted. Merging two
        elements of the same set changes nothing and returns their root.

        Raises
        ------
        OutOfRangeError
            If `x` or `y` is not an element of the set.
        """
        return int(ds_union_by_rank(self._sets, self._check(x), self._check(y)))

    def connected(self, x: int, y: int) -> bool:
        """Whether `x` and `y` belong to the same set."""
        return self.find(x) == self.find(y)

    def roots(self) -> NDArray[np.int64]:
        """Returns the root of every element, compressing all paths in the process."""
        return _ds_roots(self._sets)

    @property
    def n_sets(self) -> int:
        """Number of disjoint sets."""
        return int(np.count_nonzero(self._sets[0] == np.arange(len(self))))


@numba.njit(cache=True)
def _ds_roots(disjoint_set: tuple[NDArray[np.int64], NDArray[np.int64]]) -> NDArray[np.int64]:
    n = disjoint_set[0].size
    roots = np.empty(n, dtype=np.int64)
    for i in range(n):
        roots[i] = ds_find(disjoint_set, i)
    return roots
