"""
Input validation shared by the store and both indexes.

All public entry points funnel vectors through validate_vector() so that every
vector held by the library is a finite, 1-D float64 numpy array of the right
dimension.
"""

from typing import Any, Optional, Sequence, Union
import numbers

import numpy as np
import numpy.typing as npt

from hnswlab.exceptions import DimensionMismatch, InvalidParameter, InvalidVector

Vector = npt.NDArray[np.float64]
VectorLike = Union[Vector, Sequence[float]]


def validate_vector(vector: VectorLike, dimension: Optional[int] = None) -> Vector:
    """
    Convert input to a float64 vector and check it.

    Args:
        vector: Sequence of numbers or 1D numpy array
        dimension: Expected length (skipped if None)

    Returns:
        A new float64 numpy array (never a view of the input)

    Raises:
        InvalidVector: If the input is not 1D, not numeric, or has a non-finite element
        DimensionMismatch: If the length differs from dimension
    """
    if isinstance(vector, (str, bytes)):
        raise InvalidVector("Vector must be a sequence of numbers, not a string")

    try:
        arr = np.array(vector, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidVector(f"Vector elements must be numbers: {exc}") from exc

    if arr.ndim != 1:
        raise InvalidVector(f"Vector must be one-dimensional, got shape {arr.shape}")

    if dimension is not None and arr.shape[0] != dimension:
        raise DimensionMismatch(expected=dimension, actual=arr.shape[0])

    if not np.all(np.isfinite(arr)):
        raise InvalidVector("All vector elements must be finite numbers")

    return arr


def validate_k(k: Any) -> int:
    """Check that k (number of results) is a positive integer."""
    if isinstance(k, bool) or not isinstance(k, numbers.Integral) or k < 1:
        raise InvalidParameter(f"k must be a positive integer, got {k!r}")
    return int(k)
