"""Exception classes for roiclust."""

__all__ = [
    "DimensionMismatchError",
    "InvalidSizeError",
    "OutOfRangeError",
]


class InvalidSizeError(ValueError):
    """Raised when an entity count is negative or cannot hold a clustering run.

    A :class:`.DisjointSet` accepts zero elements, but a clustering run needs
    at least one entity.
    """


class DimensionMismatchError(ValueError):
    """Raised when a distance structure is not a square 2D matrix, or when
    the per-entity timepoint collection disagrees with the number of entities.
    """


class OutOfRangeError(IndexError):
    """Raised when an entity index or a timepoint falls outside its declared bounds."""
