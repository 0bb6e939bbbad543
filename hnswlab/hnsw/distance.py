"""
Distance and similarity metrics for vector comparisons.

This module provides functions to measure how similar or different two vectors are.
In vector databases, we use these metrics to find the most similar items to a query.

Euclidean distance is the straight-line distance between two points. Cosine
similarity measures the angle between vectors (ranges from -1 to 1, where 1 means
identical direction) and ignores magnitude; cosine distance turns it into a
dissimilarity so both metrics rank "smaller is closer".
"""

from typing import Callable, Dict, Optional

import numpy as np
import numpy.typing as npt

from hnswlab.config import SUPPORTED_METRICS
from hnswlab.exceptions import DimensionMismatch, InvalidParameter

Vector = npt.NDArray[np.float64]
DistanceFunction = Callable[[Vector, Vector], float]


def _check_lengths(v1: Vector, v2: Vector) -> None:
    if len(v1) != len(v2):
        raise DimensionMismatch(expected=len(v1), actual=len(v2))


def _unit_scaled(v: Vector) -> Optional[Vector]:
    """Divide by the largest |component| so squared norms stay in [1, dim]; None for a zero vector."""
    largest = np.max(np.abs(v))
    if largest == 0.0:
        return None
    return v / largest


def euclidean_distance(v1: Vector, v2: Vector) -> float:
    """
    Compute Euclidean (L2) distance between two vectors.

    Args:
        v1: First vector (1D numpy array)
        v2: Second vector (1D numpy array)

    Returns:
        Distance >= 0 (0 means identical)

    Raises:
        DimensionMismatch: If the vectors have different lengths

    Example:
        >>> euclidean_distance(np.array([0.0, 0.0]), np.array([3.0, 4.0]))
        5.0
    """
    _check_lengths(v1, v2)
    diff = np.asarray(v1, dtype=np.float64) - np.asarray(v2, dtype=np.float64)
    return float(np.sqrt(np.dot(diff, diff)))


def cosine_similarity(v1: Vector, v2: Vector) -> float:
    """
    Compute cosine similarity between two vectors.

    Cosine similarity measures the cosine of the angle between two vectors.
    It ranges from -1 (opposite directions) to 1 (same direction).
    A zero vector has no direction, so its similarity to anything is 0.

    Args:
        v1: First vector (1D numpy array)
        v2: Second vector (1D numpy array)

    Returns:
        Similarity score between -1 and 1 (higher means more similar)

    Raises:
        DimensionMismatch: If the vectors have different lengths

    Example:
        >>> v1 = np.array([1.0, 0.0, 0.0])
        >>> v2 = np.array([1.0, 0.0, 0.0])
        >>> cosine_similarity(v1, v2)
        1.0
    """
    _check_lengths(v1, v2)
    v1 = _unit_scaled(np.asarray(v1, dtype=np.float64))
    v2 = _unit_scaled(np.asarray(v2, dtype=np.float64))

    if v1 is None or v2 is None:
        return 0.0

    dot_product = np.dot(v1, v2)

    # Squared magnitudes; sqrt of their product keeps v.v / |v||v| exactly 1
    sq_norm_v1 = np.dot(v1, v1)
    sq_norm_v2 = np.dot(v2, v2)

    return float(np.clip(dot_product / np.sqrt(sq_norm_v1 * sq_norm_v2), -1.0, 1.0))


def cosine_distance(v1: Vector, v2: Vector) -> float:
    """
    Compute cosine distance between two vectors.

    Cosine distance is defined as 1 - cosine_similarity, converting similarity
    to a distance metric. It ranges from 0 (identical) to 2 (opposite directions).

    Example:
        >>> cosine_distance(np.array([1.0, 0.0]), np.array([0.0, 0.0]))
        1.0
    """
    return 1.0 - cosine_similarity(v1, v2)


_METRICS: Dict[str, DistanceFunction] = {
    "euclidean": euclidean_distance,
    "cosine": cosine_distance,
}


def get_metric(name: str) -> DistanceFunction:
    """
    Look up a distance function by name.

    Args:
        name: "euclidean" or "cosine"

    Returns:
        Function mapping two vectors to a distance (lower = closer)

    Raises:
        InvalidParameter: If the metric is not supported
    """
    if name not in _METRICS:
        raise InvalidParameter(
            f"Unsupported metric {name!r} (supported: {', '.join(SUPPORTED_METRICS)})"
        )
    return _METRICS[name]


def batch_distances(matrix: npt.NDArray[np.float64], query: Vector, metric: str) -> npt.NDArray[np.float64]:
    """
    Distances from one query to every row of a matrix.

    Vectorized counterpart of euclidean_distance / cosine_distance, used by the
    exact scanner.

    Args:
        matrix: 2D array, shape (n_vectors, dim)
        query: 1D array, shape (dim,)
        metric: "euclidean" or "cosine"

    Returns:
        1D array of n_vectors distances
    """
    get_metric(metric)
    if matrix.shape[1] != len(query):
        raise DimensionMismatch(expected=matrix.shape[1], actual=len(query))

    if metric == "euclidean":
        diff = matrix - query
        return np.sqrt(np.einsum("ij,ij->i", diff, diff))

    # Zero-magnitude rows (or a zero query) get similarity 0 -> distance 1
    similarities = np.zeros(len(matrix), dtype=np.float64)

    query = _unit_scaled(np.asarray(query, dtype=np.float64))
    if query is None:
        return 1.0 - similarities

    row_max = np.max(np.abs(matrix), axis=1) if len(matrix) else np.zeros(0)
    nonzero = row_max > 0.0
    rows = matrix[nonzero] / row_max[nonzero, np.newaxis]

    dots = rows @ query
    sq_norms = np.einsum("ij,ij->i", rows, rows)
    similarities[nonzero] = np.clip(dots / np.sqrt(sq_norms * np.dot(query, query)), -1.0, 1.0)
    return 1.0 - similarities
