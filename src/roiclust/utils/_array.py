from __future__ import annotations

__all__ = []

import logging
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import sparse

from roiclust._log import LogMessage
from roiclust.exceptions import DimensionMismatchError

_logger = logging.getLogger(__name__)


def to_numpy(array: ArrayLike) -> NDArray[Any]:
    """Converts an ArrayLike or SciPy sparse matrix to a Numpy array without copying Numpy input"""
    if isinstance(array, np.ndarray | np.memmap):
        return array
    if sparse.issparse(array):
        _logger.log(logging.INFO, "Converting SciPy sparse matrix to NumPy array.")
        return np.asarray(array.toarray())  # type: ignore[union-attr]
    return np.asarray(array)


def to_csc(array: Any, *, use_sparse: bool = True) -> sparse.csc_matrix:
    """
    Converts a square distance structure into a canonical CSC matrix.

    With ``use_sparse`` the stored entries of a sparse input are kept as stored,
    including explicit zeros. Otherwise the input is densified first, so only
    non-zero values survive the conversion.

    Raises
    ------
    DimensionMismatchError
        If the input is not a square 2D matrix.
    ValueError
        If a stored distance is NaN or negative.
    """
    if sparse.issparse(array) and use_sparse:
        csc = sparse.csc_matrix(array, copy=True)
    else:
        dense = to_numpy(array)
        _logger.log(logging.DEBUG, LogMessage(lambda: f"Densified distance input with shape {dense.shape}"))
        if dense.ndim != 2:
            raise DimensionMismatchError(f"Distance matrix must be 2D; got {dense.ndim} dimensions.")
        csc = sparse.csc_matrix(dense)

    rows, cols = csc.shape
    if rows != cols:
        raise DimensionMismatchError(f"Distance matrix must be square; got shape {csc.shape}.")

    csc.sum_duplicates()
    csc.sort_indices()

    # NaN compares False against any threshold and would never stop the merge loop
    if np.isnan(csc.data).any():
        raise ValueError("Distance matrix must not contain NaN values.")
    if (csc.data < 0).any():
        raise ValueError(f"Distances must be non-negative; got minimum {csc.data.min()}.")
    return csc
