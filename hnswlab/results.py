"""Result records returned by both indexes."""

from typing import Any, Dict, Optional

import numpy as np
import numpy.typing as npt

Vector = npt.NDArray[np.float64]

# {"id": int, "vector": ndarray, "distance": float, "similarity": float | None}
SearchResult = Dict[str, Any]


def format_result(node_id: int, vector: Vector, distance: float, metric: str) -> SearchResult:
    """
    Build a result dict.

    Args:
        node_id: ID of the matched vector
        vector: Stored vector (copied into the result)
        distance: Distance to the query under `metric`
        metric: Metric name; similarity is only filled for "cosine"

    Returns:
        Dict with keys 'id', 'vector', 'distance', 'similarity'
    """
    similarity: Optional[float] = None
    if metric == "cosine":
        similarity = 1.0 - float(distance)

    return {
        "id": int(node_id),
        "vector": np.array(vector, dtype=np.float64),
        "distance": float(distance),
        "similarity": similarity,
    }
