from __future__ import annotations

__all__ = ["TimepointMembership"]

import logging
import operator
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeAlias

import numpy as np
from numpy.typing import NDArray

from roiclust.exceptions import DimensionMismatchError, OutOfRangeError

_logger = logging.getLogger(__name__)

EntityTimepoints: TypeAlias = Mapping[int, Iterable[int]] | Sequence[Iterable[int]]


def _as_index(value: Any, kind: str) -> int:
    try:
        return operator.index(value)
    except TypeError as e:
        raise OutOfRangeError(f"{kind} {value!r} is not an integer index.") from e


def _iter_entities(entity_timepoints: EntityTimepoints, n: int) -> Iterable[tuple[int, Iterable[int]]]:
    if isinstance(entity_timepoints, Mapping):
        for key, timepoints in entity_timepoints.items():
            entity = _as_index(key, "Entity")
            if not 0 <= entity < n:
                raise OutOfRangeError(f"Entity {entity} is outside of the entity range [0, {n}).")
            yield entity, timepoints
    else:
        if len(entity_timepoints) != n:
            raise DimensionMismatchError(f"Expected timepoints for {n} entities; got {len(entity_timepoints)}.")
        yield from enumerate(entity_timepoints)


def max_timepoint(entity_timepoints: EntityTimepoints) -> int:
    """Returns the largest recorded timepoint, or -1 when nothing was recorded."""
    values = entity_timepoints.values() if isinstance(entity_timepoints, Mapping) else entity_timepoints
    return max((_as_index(t, "Timepoint") for timepoints in values for t in timepoints), default=-1)


class TimepointMembership:
    """
    Per-slot presence counts over timepoints.

    Row ``r`` holds, for every timepoint, how many of the merged sub-clusters
    of the cluster rooted at ``r`` were observed at that timepoint. Initially
    each entity owns its own 0/1 row. Only rows of current roots are
    meaningful; the row of a root that is attached under another root is
    stale and is never read again.

    Parameters
    ----------
    counts : NDArray[np.int32], shape - (N, T)
        Presence matrix of N entities over T timepoints
    """

    def __init__(self, counts: NDArray[np.int32]) -> None:
        self.counts = counts

    @classmethod
    def build(
        cls, entity_timepoints: EntityTimepoints, n: int, n_timepoints: int | None = None
    ) -> TimepointMembership:
        """
        Builds the presence matrix of `n` entities.

        Parameters
        ----------
        entity_timepoints : Mapping[int, Iterable[int]] or Sequence[Iterable[int]]
            Timepoints at which each entity was observed. Entities missing
            from a mapping were never observed. Iterating a mapping value
            yields its keys, so ``{entity: {timepoint: ...}}`` also works.
        n : int
            Number of entities
        n_timepoints : int or None, default None
            Number of timepoint columns. Defaults to the largest recorded
            timepoint plus one.

        Returns
        -------
        TimepointMembership

        Raises
        ------
        DimensionMismatchError
            If a sequence of timepoints does not hold exactly `n` entries.
        OutOfRangeError
            If an entity is outside ``[0, n)``, a timepoint is outside
            ``[0, n_timepoints)``, or either is not an integer.
        """
        if n_timepoints is None:
            n_timepoints = max_timepoint(entity_timepoints) + 1

        counts = np.zeros((n, n_timepoints), dtype=np.int32)
        for entity, timepoints in _iter_entities(entity_timepoints, n):
            for value in timepoints:
                t = _as_index(value, "Timepoint")
                if not 0 <= t < n_timepoints:
                    raise OutOfRangeError(
                        f"Timepoint {t} of entity {entity} is outside of the timepoint range [0, {n_timepoints})."
                    )
                counts[entity, t] = 1

        _logger.debug(f"Built timepoint membership for {n} entities over {n_timepoints} timepoints")
        return cls(counts)

    @property
    def n_timepoints(self) -> int:
        return self.counts.shape[1]

    def row(self, root: int) -> NDArray[np.int32]:
        return self.counts[root]

    def assign(self, root: int, row: NDArray[np.int32]) -> None:
        self.counts[root] = row

    @staticmethod
    def merged_row(row_a: NDArray[np.int32], row_b: NDArray[np.int32]) -> NDArray[np.int32]:
        """
        Elementwise sum of two rows.

        A value of 2 or more marks a timepoint at which both clusters were
        observed, which a logical OR would not distinguish.
        """
        return row_a + row_b

    @staticmethod
    def overlap_ratio(merged_row: NDArray[Any]) -> float:
        """
        Fraction of observed timepoints that more than one sub-cluster contributes to.

        A merged row without any observed timepoint has no collisions and
        yields 0.0.
        """
        present = np.count_nonzero(merged_row > 0)
        if present == 0:
            return 0.0
        return np.count_nonzero(merged_row > 1) / present
