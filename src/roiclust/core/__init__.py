"""
Core functions and data structures for constrained sparse single-linkage clustering.
"""

__all__ = [
    "ClusterResult",
    "DisjointSet",
    "EdgeSequence",
    "TimepointMembership",
    "cluster",
    "hclust_minimum_threshold_sparse",
    "sorted_edges",
]

from roiclust.core._disjoint_set import DisjointSet
from roiclust.core._edges import EdgeSequence, sorted_edges
from roiclust.core._linkage import ClusterResult, cluster, hclust_minimum_threshold_sparse
from roiclust.core._membership import TimepointMembership
