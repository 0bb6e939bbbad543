"""
HNSW (Hierarchical Navigable Small World) implementation module.

This module contains the core HNSW algorithm components for building and searching
graph-based approximate nearest neighbor indexes.

Components:
- distance: Distance metrics (euclidean, cosine)
- utils: Helper functions (layer assignment, neighbor selection)
- graph: Node arena with tombstones and entry point tracking
- builder: Insertion algorithm
- searcher: Layer search and query algorithm
- trace: Step-by-step search records
"""

from hnswlab.hnsw.distance import (
    cosine_distance,
    cosine_similarity,
    euclidean_distance,
    get_metric,
)
from hnswlab.hnsw.graph import HNSWNode, HNSWGraph
from hnswlab.hnsw.builder import HNSWBuilder
from hnswlab.hnsw.searcher import HNSWSearcher
from hnswlab.hnsw.trace import LayerTrace, SearchStep

__all__ = [
    "cosine_similarity",
    "cosine_distance",
    "euclidean_distance",
    "get_metric",
    "HNSWNode",
    "HNSWGraph",
    "HNSWBuilder",
    "HNSWSearcher",
    "LayerTrace",
    "SearchStep",
]
