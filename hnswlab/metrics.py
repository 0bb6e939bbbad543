"""
Metrics for evaluating search quality and cost.

This module provides functions to:
- Compute recall@k (fraction of ground truth neighbors retrieved)
- Compare HNSW results against exact brute-force ground truth
- Time a search call
- Estimate raw vector memory and flag degenerate vectors
"""

import time
from typing import Any, Callable, Dict, List, Sequence

import numpy as np

from hnswlab.validation import VectorLike

# float64 components
BYTES_PER_COMPONENT = 8


def compute_recall_at_k(
    retrieved_ids: List[int],
    ground_truth_ids: List[int],
    k: int = 10
) -> float:
    """
    Compute recall@k: fraction of ground truth neighbors retrieved.

    Args:
        retrieved_ids: IDs returned by search (ordered by relevance)
        ground_truth_ids: True k-nearest neighbor IDs
        k: Number of neighbors to consider

    Returns:
        Recall@k between 0.0 and 1.0. When fewer than k true neighbors exist
        (small collections) the denominator is the number that exist.

    Example:
        >>> retrieved = [1, 2, 3, 99, 98]
        >>> ground_truth = [1, 2, 3, 4, 5]
        >>> compute_recall_at_k(retrieved, ground_truth, k=5)
        0.6  # Found 3 out of 5 correct neighbors
    """
    retrieved_set = set(retrieved_ids[:k])
    ground_truth_set = set(ground_truth_ids[:k])

    if not ground_truth_set:
        return 0.0

    return len(retrieved_set & ground_truth_set) / len(ground_truth_set)


def compare_with_brute_force(
    hnsw_index,
    brute_force_index,
    queries: Sequence[VectorLike],
    k: int = 10,
    metric: str = "euclidean",
) -> float:
    """
    Mean recall@k of an HNSW index against exact search over the same store.

    Args:
        hnsw_index: HNSWIndex to evaluate
        brute_force_index: BruteForceIndex over the same store
        queries: Query vectors
        k: Number of neighbors per query
        metric: Metric for the exact search (should match the HNSW index)

    Returns:
        Average recall@k over all queries (0.0 if no queries)
    """
    if len(queries) == 0:
        return 0.0

    recalls = []
    for query in queries:
        approx_ids = [r["id"] for r in hnsw_index.search(query, k=k)]
        exact_ids = [r["id"] for r in brute_force_index.search(query, k=k, metric=metric)]
        recalls.append(compute_recall_at_k(approx_ids, exact_ids, k=k))

    return float(np.mean(recalls))


def measure_search_performance(search_fn: Callable[..., Any], *args, **kwargs) -> Dict[str, Any]:
    """
    Run a search callable once and time it.

    Returns:
        Dict with 'results' (the callable's return value) and
        'execution_time_ms'
    """
    start_time = time.perf_counter()
    results = search_fn(*args, **kwargs)
    end_time = time.perf_counter()

    return {
        "results": results,
        "execution_time_ms": (end_time - start_time) * 1000.0,
    }


def estimate_memory_usage(n_vectors: int, dimension: int) -> Dict[str, float]:
    """
    Estimate raw storage for n float64 vectors (graph overhead excluded).

    Returns:
        Dict with 'bytes', 'kilobytes' and 'megabytes' (the last two rounded to 2 places)
    """
    total_bytes = n_vectors * dimension * BYTES_PER_COMPONENT

    return {
        "bytes": total_bytes,
        "kilobytes": round(total_bytes / 1024, 2),
        "megabytes": round(total_bytes / (1024 * 1024), 2),
    }


def validate_vector_quality(vectors: Sequence[VectorLike]) -> Dict[str, Any]:
    """
    Flag vectors that would be rejected or behave oddly.

    Non-finite vectors are rejected by the store; all-zero vectors are accepted
    but have cosine similarity 0 to everything.

    Returns:
        Dict with 'is_valid' and 'issues' (one message per problem found)
    """
    issues = []

    for index, vector in enumerate(vectors):
        arr = np.asarray(vector, dtype=np.float64)

        if np.any(np.isnan(arr)):
            issues.append(f"vector {index}: contains NaN")
        if np.any(np.isinf(arr)):
            issues.append(f"vector {index}: contains infinity")
        if arr.size > 0 and np.all(arr == 0.0):
            issues.append(f"vector {index}: all components are zero")

    return {
        "is_valid": len(issues) == 0,
        "issues": issues,
    }
