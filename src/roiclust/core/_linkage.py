from __future__ import annotations

__all__ = []

import logging
import math
from typing import Any, TypedDict

import numpy as np
from numpy.typing import NDArray

from roiclust._log import LogMessage
from roiclust.core._disjoint_set import DisjointSet
from roiclust.core._edges import sorted_edges
from roiclust.core._membership import EntityTimepoints, TimepointMembership
from roiclust.exceptions import InvalidSizeError

_logger = logging.getLogger(__name__)


class ClusterResult(TypedDict):
    """
    Constrained linkage output data structure.

    Attributes
    ----------
    disjoint_set : DisjointSet
        Final state of the cluster forest
    roots : NDArray[np.intp]
        Root entity of the cluster of every entity
    merges : NDArray[np.float64]
        Accepted merges in order as rows of ``[i, j, distance]``
    n_examined : int
        Number of candidate merges read before the loop ended
    n_rejected : int
        Number of candidate merges rejected by the overlap constraint
    stop_distance : float or None
        Distance of the candidate that exceeded the height threshold, or None
        when every candidate was read
    matched : NDArray[np.bool_] or None
        Entities that took part in an accepted merge, only in pair match mode
    """

    disjoint_set: DisjointSet
    roots: NDArray[np.intp]
    merges: NDArray[np.float64]
    n_examined: int
    n_rejected: int
    stop_distance: float | None
    matched: NDArray[np.bool_] | None


def _validate_thresholds(overlap_threshold: float, height_threshold: float) -> None:
    if math.isnan(overlap_threshold) or not 0.0 <= overlap_threshold <= 1.0:
        raise ValueError(f"Overlap threshold must be in the range [0, 1]; got {overlap_threshold}.")
    if math.isnan(height_threshold) or height_threshold < 0.0:
        raise ValueError(f"Height threshold must be non-negative; got {height_threshold}.")


def cluster(
    distances: Any,
    entity_timepoints: EntityTimepoints,
    overlap_threshold: float,
    height_threshold: float,
    *,
    use_sparse: bool = True,
    pair_match: bool = False,
    n_timepoints: int | None = None,
) -> ClusterResult:
    """
    Single-linkage clustering of sparse distances under a timepoint overlap constraint.

    Candidate merges are read in ascending order of distance. A merge is
    accepted when the two entities are in different clusters and the merged
    cluster's overlap ratio, the fraction of its observed timepoints that
    both clusters were observed at, does not exceed `overlap_threshold`.
    Reading stops at the first candidate farther apart than `height_threshold`.
    A rejected candidate is never revisited.

    Parameters
    ----------
    distances : ArrayLike or scipy.sparse matrix, shape - (N, N)
        Symmetric non-negative distance matrix. Only stored entries above the
        diagonal are candidate merges.
    entity_timepoints : Mapping[int, Iterable[int]] or Sequence[Iterable[int]]
        Timepoints at which each of the N entities was observed
    overlap_threshold : float
        Largest tolerated overlap ratio, in the range [0, 1]
    height_threshold : float
        Largest distance at which a merge is still considered
    use_sparse : bool, default True
        Keep the stored entries of a sparse input as stored. When False the
        input is densified and zero entries are never candidates.
    pair_match : bool, default False
        Allow every entity to take part in at most one accepted merge, which
        caps clusters at two entities and turns the clustering into a greedy
        matching.
    n_timepoints : int or None, default None
        Number of timepoints, defaults to the largest recorded timepoint plus one

    Returns
    -------
    ClusterResult
        Mapping with keys:
        - disjoint_set : DisjointSet - Final state of the cluster forest
        - roots : NDArray[np.intp] - Root entity of every entity
        - merges : NDArray[np.float64] - Accepted merges as ``[i, j, distance]``
        - n_examined : int - Candidate merges read
        - n_rejected : int - Candidate merges rejected by the overlap constraint
        - stop_distance : float or None - Distance that ended the loop early
        - matched : NDArray[np.bool_] or None - Pair match participation flags

    Raises
    ------
    InvalidSizeError
        If the distance matrix holds no entities.
    DimensionMismatchError
        If the distance matrix is not square, or the timepoint sequence does
        not match its size.
    OutOfRangeError
        If an entity or timepoint is out of bounds.
    ValueError
        If a threshold is out of range, or a distance is NaN or negative.

    Examples
    --------
    >>> import numpy as np
    >>> d = np.zeros((4, 4))
    >>> d[0, 1] = d[1, 0] = 1.0
    >>> d[2, 3] = d[3, 2] = 2.0
    >>> d[0, 2] = d[2, 0] = 5.0
    >>> result = cluster(d, [[0], [1], [2], [3]], overlap_threshold=1.0, height_threshold=3.0)
    >>> result["disjoint_set"].n_sets
    2
    >>> result["stop_distance"]
    5.0
    """
    _validate_thresholds(overlap_threshold, height_threshold)

    edges = sorted_edges(distances, use_sparse=use_sparse)
    n = edges.n
    if n < 1:
        raise InvalidSizeError("Distance matrix must hold at least one entity.")

    membership = TimepointMembership.build(entity_timepoints, n, n_timepoints)
    disjoint_set = DisjointSet.create(n)
    matched = np.zeros(n, dtype=np.bool_) if pair_match else None

    merges: list[tuple[int, int, float]] = []
    n_examined = 0
    n_rejected = 0
    stop_distance: float | None = None

    for i, j, distance in edges:
        if distance > height_threshold:
            stop_distance = distance
            break
        n_examined += 1

        root_i = disjoint_set.find(i)
        root_j = disjoint_set.find(j)
        if root_i == root_j:
            continue

        if matched is not None and (matched[i] or matched[j]):
            continue

        merged = TimepointMembership.merged_row(membership.row(root_i), membership.row(root_j))
        if TimepointMembership.overlap_ratio(merged) > overlap_threshold:
            n_rejected += 1
            continue

        root = disjoint_set.union(root_i, root_j)
        membership.assign(root, merged)
        merges.append((i, j, distance))

        if matched is not None:
            matched[i] = matched[j] = True

    _logger.log(
        logging.DEBUG,
        LogMessage(
            lambda: f"Examined {n_examined} of {len(edges)} edges: {len(merges)} merged, {n_rejected} rejected, "
            f"stopped at {stop_distance}"
        ),
    )

    return ClusterResult(
        disjoint_set=disjoint_set,
        roots=disjoint_set.roots().astype(np.intp),
        merges=np.array(merges, dtype=np.float64).reshape(-1, 3),
        n_examined=n_examined,
        n_rejected=n_rejected,
        stop_distance=stop_distance,
        matched=matched,
    )


def hclust_minimum_threshold_sparse(
    ds: Any,
    inv_map: EntityTimepoints,
    overlap_threshold: float,
    height_threshold: float,
    *,
    use_sparse: bool = True,
    pair_match: bool = False,
) -> DisjointSet:
    """
    Clusters a matrix of pairwise distances between ROIs and returns the cluster forest.

    Shorthand for :func:`cluster` that only returns the final
    :class:`DisjointSet`.

    Parameters
    ----------
    ds : ArrayLike or scipy.sparse matrix, shape - (N, N)
        Pairwise distances between ROIs
    inv_map : Mapping[int, Iterable[int]] or Sequence[Iterable[int]]
        Timepoints at which each ROI was found
    overlap_threshold : float
        Largest tolerated overlap ratio, in the range [0, 1]
    height_threshold : float
        Largest distance at which a merge is still considered
    use_sparse : bool, default True
        Keep the stored entries of a sparse input as stored
    pair_match : bool, default False
        Only merge clusters into pairs, turning it into a matching algorithm

    Returns
    -------
    DisjointSet
    """
    return cluster(
        ds,
        inv_map,
        overlap_threshold,
        height_threshold,
        use_sparse=use_sparse,
        pair_match=pair_match,
    )["disjoint_set"]
