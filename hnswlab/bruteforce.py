"""
Exact k-nearest-neighbor search by full scan.

BruteForceIndex compares the query against every live vector in a VectorStore.
It is O(n * dim) per query and always exact, which makes it the ground truth
that HNSWIndex results are measured against (see hnswlab.metrics).
"""

import logging
from typing import Any, Dict, List, Sequence

import numpy as np

from hnswlab.config import SUPPORTED_METRICS
from hnswlab.hnsw.distance import batch_distances, get_metric
from hnswlab.results import SearchResult, format_result
from hnswlab.validation import VectorLike, validate_k, validate_vector
from hnswlab.vector_store import VectorStore

logger = logging.getLogger(__name__)


def brute_force_search(
    vectors: Sequence[VectorLike],
    query: VectorLike,
    k: int = 5,
    metric: str = "euclidean",
) -> List[SearchResult]:
    """
    Exact kNN over a plain sequence of vectors (IDs are list positions).

    Args:
        vectors: Vectors to scan; all must share the query's length
        query: Query vector
        k: Number of results to return
        metric: "euclidean" or "cosine"

    Returns:
        Up to k result dicts sorted by (distance, id) ascending

    Raises:
        DimensionMismatch: If the query length differs from the vectors' length
        InvalidParameter: If k < 1 or the metric is unsupported
    """
    get_metric(metric)
    k = validate_k(k)

    if len(vectors) == 0:
        return []

    # The first vector fixes the dimension for the rest and for the query
    dimension = len(validate_vector(vectors[0]))
    matrix = np.vstack([validate_vector(v, dimension) for v in vectors])

    ids = np.arange(len(matrix))
    query_vec = validate_vector(query, dimension)
    return _rank(ids, matrix, query_vec, k, metric)


def _rank(
    ids: np.ndarray,
    matrix: np.ndarray,
    query: np.ndarray,
    k: int,
    metric: str,
) -> List[SearchResult]:
    """Sort rows by (distance, id) and format the top k."""
    distances = batch_distances(matrix, query, metric)

    # lexsort uses the last key as primary: distance first, then id
    order = np.lexsort((ids, distances))[:k]

    return [
        format_result(ids[i], matrix[i], distances[i], metric)
        for i in order
    ]


class BruteForceIndex:
    """
    Exact search over a VectorStore.

    The index holds no state of its own: every search reads the store's current
    live vectors, so it never needs rebuilding after adds or removals.
    """

    def __init__(self, store: VectorStore) -> None:
        """
        Args:
            store: The VectorStore to scan
        """
        self.store = store

    def search(
        self, query: VectorLike, k: int = 5, metric: str = "euclidean"
    ) -> List[SearchResult]:
        """
        Find the k nearest live vectors to the query.

        Args:
            query: Query vector of length store.dimension
            k: Number of results to return
            metric: "euclidean" or "cosine"

        Returns:
            Result dicts {'id', 'vector', 'distance', 'similarity'} sorted by
            distance ascending, ties broken by ascending ID. 'similarity' is only
            set for the cosine metric. Empty list if the store has no live vectors.

        Raises:
            DimensionMismatch: If the query length differs from the store dimension
            InvalidVector: If the query has non-finite elements
            InvalidParameter: If k < 1 or the metric is unsupported
        """
        get_metric(metric)
        k = validate_k(k)
        query_vec = validate_vector(query, self.store.dimension)

        ids = self.store.ids()
        if not ids:
            return []

        matrix = np.vstack([self.store.view(i) for i in ids])
        results = _rank(np.array(ids), matrix, query_vec, k, metric)

        logger.debug(
            "Brute force search scanned %d vectors (metric=%s, k=%d)", len(ids), metric, k
        )
        return results

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the scanned store.

        Returns:
            Dictionary with vector count, dimension and supported metrics
        """
        return {
            "total_vectors": self.store.size(),
            "dimension": self.store.dimension,
            "supported_metrics": list(SUPPORTED_METRICS),
            "search_type": "brute_force",
        }
