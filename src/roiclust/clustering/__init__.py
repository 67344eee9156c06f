"""
Evaluators that cluster regions of interest from their pairwise distances.
"""

__all__ = ["ClusterOutput", "ConstrainedLinkage"]

from roiclust.clustering._constrained import ClusterOutput, ConstrainedLinkage
