from __future__ import annotations

__all__ = ["EdgeSequence", "sorted_edges"]

import logging
from collections.abc import Iterator
from typing import Any

import numpy as np
from numpy.typing import NDArray

from roiclust._log import LogMessage
from roiclust.config import get_explicit_zeros
from roiclust.utils._array import to_csc

_logger = logging.getLogger(__name__)


class EdgeSequence:
    """
    Candidate merges of a sparse distance matrix in ascending order of distance.

    Iterating yields ``(i, j, distance)`` tuples with ``i < j``. The sequence
    can only be consumed once; a second iteration raises ``RuntimeError``.

    Attributes
    ----------
    rows : NDArray[np.intp]
        Row index of every edge, in iteration order
    cols : NDArray[np.intp]
        Column index of every edge, in iteration order
    distances : NDArray[np.float64]
        Distance of every edge, non-decreasing
    n : int
        Number of entities of the source matrix
    """

    def __init__(self, rows: NDArray[np.intp], cols: NDArray[np.intp], distances: NDArray[Any], n: int) -> None:
        self.rows = rows
        self.cols = cols
        self.distances = distances
        self.n = n
        self._consumed = False

    def __len__(self) -> int:
        return self.distances.size

    def __iter__(self) -> Iterator[tuple[int, int, float]]:
        if self._consumed:
            raise RuntimeError("EdgeSequence has already been consumed.")
        self._consumed = True
        return self._generate()

    def _generate(self) -> Iterator[tuple[int, int, float]]:
        for idx in range(self.distances.size):
            yield int(self.rows[idx]), int(self.cols[idx]), float(self.distances[idx])

    @property
    def consumed(self) -> bool:
        """Whether iteration over the sequence has started."""
        return self._consumed


def sorted_edges(distances: Any, *, use_sparse: bool = True) -> EdgeSequence:
    """
    Extract the upper triangle entries of a distance matrix sorted by distance.

    Only structurally stored entries are considered, so the cost scales with
    the number of stored distances rather than with the square of the number
    of entities. Ties keep their column-major storage order.

    Parameters
    ----------
    distances : ArrayLike or scipy.sparse matrix, shape - (N, N)
        Symmetric non-negative distance matrix. Only entries above the
        diagonal are read.
    use_sparse : bool, default True
        Keep the stored entries of a sparse input as stored. When False the
        input is densified first, so zero entries are never candidates.

    Returns
    -------
    EdgeSequence
        One-shot sequence of ``(i, j, distance)`` candidate merges.

    Raises
    ------
    DimensionMismatchError
        If `distances` is not a square 2D matrix.
    ValueError
        If a stored distance is NaN or negative.

    Notes
    -----
    Whether a stored zero is a zero-distance candidate or is dropped is set
    with :func:`roiclust.config.set_explicit_zeros`.

    Examples
    --------
    >>> import numpy as np
    >>> d = np.array([[0.0, 2.0, 1.0], [2.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    >>> [(i, j) for i, j, _ in sorted_edges(d)]
    [(0, 2), (0, 1)]
    """
    csc = to_csc(distances, use_sparse=use_sparse)
    coo = csc.tocoo()

    mask = coo.row < coo.col
    if get_explicit_zeros() == "absent":
        mask &= coo.data != 0

    rows = coo.row[mask].astype(np.intp)
    cols = coo.col[mask].astype(np.intp)
    data = np.asarray(coo.data[mask], dtype=np.float64)

    order = np.argsort(data, kind="stable")
    _logger.log(
        logging.DEBUG,
        LogMessage(lambda: f"Sorted {order.size} upper triangle edges out of {coo.nnz} stored entries"),
    )
    return EdgeSequence(rows[order], cols[order], data[order], csc.shape[0])
