"""
hnswlab - Exact and HNSW vector search with inspectable graphs

An in-memory vector store with a brute-force kNN baseline and an incrementally
built multi-layer navigable graph index whose structure and search steps can be
inspected for visualization.
"""

import logging

__version__ = "0.1.0"

from hnswlab.vector_store import VectorStore
from hnswlab.bruteforce import BruteForceIndex, brute_force_search
from hnswlab.hnsw_index import HNSWIndex
from hnswlab.config import (
    HNSWLabConfig,
    get_default_config,
    get_high_recall_config,
)
from hnswlab.exceptions import (
    HNSWLabError,
    DimensionMismatch,
    InvalidVector,
    InvalidParameter,
    NotFound,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "VectorStore",
    "BruteForceIndex",
    "brute_force_search",
    "HNSWIndex",
    "HNSWLabConfig",
    "get_default_config",
    "get_high_recall_config",
    "HNSWLabError",
    "DimensionMismatch",
    "InvalidVector",
    "InvalidParameter",
    "NotFound",
]
