from __future__ import annotations

__all__ = []

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from roiclust.core._linkage import cluster
from roiclust.core._membership import EntityTimepoints
from roiclust.types import Evaluator, EvaluatorConfig, Output, set_metadata

DEFAULT_LINKAGE_OVERLAP_THRESHOLD = 0.0
DEFAULT_LINKAGE_HEIGHT_THRESHOLD = math.inf
DEFAULT_LINKAGE_PAIR_MATCH = False
DEFAULT_LINKAGE_USE_SPARSE = True


@dataclass(frozen=True)
class ClusterOutput(Output):
    """
    Output class for the :class:`.ConstrainedLinkage` evaluator.

    Attributes
    ----------
    roots : NDArray[np.intp]
        Root entity of the cluster of every entity
    labels : NDArray[np.intp]
        Contiguous cluster label of every entity, numbered by first appearance
    n_clusters : int
        Number of clusters, including singletons
    merges : NDArray[np.float64]
        Accepted merges in order as rows of ``[i, j, distance]``
    n_examined : int
        Number of candidate merges read before clustering ended
    n_rejected : int
        Number of candidate merges rejected by the overlap constraint
    stop_distance : float or None
        Distance of the candidate that exceeded the height threshold, or None
        when every candidate was read
    matched : NDArray[np.bool_] or None
        Entities that took part in an accepted merge, only in pair match mode
    """

    roots: NDArray[np.intp]
    labels: NDArray[np.intp]
    n_clusters: int
    merges: NDArray[np.float64]
    n_examined: int
    n_rejected: int
    stop_distance: float | None
    matched: NDArray[np.bool_] | None

    def groups(self) -> Sequence[NDArray[np.intp]]:
        """
        Entity indices of every cluster, ordered by label.

        Returns
        -------
        Sequence[NDArray[np.intp]]
        """
        order = np.argsort(self.labels, kind="stable")
        bounds = np.cumsum(np.bincount(self.labels, minlength=self.n_clusters))[:-1]
        return np.split(order.astype(np.intp), bounds)


class ConstrainedLinkage(Evaluator):
    """
    Constrained single-linkage clustering of regions observed over time.

    Regions are merged in ascending order of distance as long as the merged
    cluster does not collect too many regions observed at the same timepoint
    and the regions are no farther apart than the height threshold.

    Parameters
    ----------
    overlap_threshold : float or None, default None
        Largest tolerated fraction of a merged cluster's observed timepoints
        that more than one of the merged clusters was observed at. Defaults
        to 0.0, so clusters never share a timepoint.
    height_threshold : float or None, default None
        Largest distance at which a merge is still considered. Defaults to
        infinity.
    pair_match : bool or None, default None
        Cap clusters at two regions, turning clustering into a greedy
        matching. Defaults to False.
    use_sparse : bool or None, default None
        Keep the stored entries of a sparse distance input as stored.
        Defaults to True.
    config : ConstrainedLinkage.Config or None, default None
        Configuration used for any parameter that is not provided.

    Examples
    --------
    >>> import numpy as np
    >>> d = np.array([[0.0, 1.0, 2.0], [1.0, 0.0, 1.5], [2.0, 1.5, 0.0]])
    >>> linkage = ConstrainedLinkage(overlap_threshold=1.0, pair_match=True)
    >>> result = linkage.evaluate(d, [[0], [1], [2]])
    >>> result.labels
    array([0, 0, 1])

    Using configuration:

    >>> config = ConstrainedLinkage.Config(height_threshold=1.0)
    >>> linkage = ConstrainedLinkage(config=config)
    """

    class Config(EvaluatorConfig):
        """
        Configuration for ConstrainedLinkage evaluator.

        Attributes
        ----------
        overlap_threshold : float, default 0.0
            Largest tolerated overlap ratio of a merged cluster.
        height_threshold : float, default inf
            Largest distance at which a merge is still considered.
        pair_match : bool, default False
            Whether every region may take part in at most one merge.
        use_sparse : bool, default True
            Whether stored entries of sparse inputs are kept as stored.
        """

        overlap_threshold: float = DEFAULT_LINKAGE_OVERLAP_THRESHOLD
        height_threshold: float = DEFAULT_LINKAGE_HEIGHT_THRESHOLD
        pair_match: bool = DEFAULT_LINKAGE_PAIR_MATCH
        use_sparse: bool = DEFAULT_LINKAGE_USE_SPARSE

    overlap_threshold: float
    height_threshold: float
    pair_match: bool
    use_sparse: bool
    config: Config

    def __init__(
        self,
        overlap_threshold: float | None = None,
        height_threshold: float | None = None,
        pair_match: bool | None = None,
        use_sparse: bool | None = None,
        config: Config | None = None,
    ) -> None:
        super().__init__(locals())

    @set_metadata(state=["overlap_threshold", "height_threshold", "pair_match", "use_sparse"])
    def evaluate(
        self, distances: Any, entity_timepoints: EntityTimepoints, *, n_timepoints: int | None = None
    ) -> ClusterOutput:
        """
        Clusters regions from their pairwise distances and observed timepoints.

        Parameters
        ----------
        distances : ArrayLike or scipy.sparse matrix, shape - (N, N)
            Symmetric non-negative distance matrix. Stored entries above the
            diagonal are candidate merges.
        entity_timepoints : Mapping[int, Iterable[int]] or Sequence[Iterable[int]]
            Timepoints at which each of the N regions was observed.
        n_timepoints : int or None, default None
            Number of timepoints, defaults to the largest recorded timepoint plus one.

        Returns
        -------
        ClusterOutput
        """
        result = cluster(
            distances,
            entity_timepoints,
            self.overlap_threshold,
            self.height_threshold,
            use_sparse=self.use_sparse,
            pair_match=self.pair_match,
            n_timepoints=n_timepoints,
        )
        _, first, labels = np.unique(result["roots"], return_index=True, return_inverse=True)
        # relabel so that labels follow the first appearance of each cluster
        relabel = np.empty(first.size, dtype=np.intp)
        relabel[np.argsort(first, kind="stable")] = np.arange(first.size, dtype=np.intp)

        return ClusterOutput(
            roots=result["roots"],
            labels=relabel[labels.reshape(-1)],
            n_clusters=int(first.size),
            merges=result["merges"],
            n_examined=result["n_examined"],
            n_rejected=result["n_rejected"],
            stop_distance=result["stop_distance"],
            matched=result["matched"],
        )
