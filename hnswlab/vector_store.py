"""
In-memory vector storage for hnswlab.
"""

import logging
from typing import Iterator, List, Optional, Tuple

import numpy as np
import numpy.typing as npt

from hnswlab.exceptions import InvalidParameter, NotFound
from hnswlab.validation import VectorLike, validate_vector

Vector = npt.NDArray[np.float64]

logger = logging.getLogger(__name__)


class VectorStore:
    """
    Fixed-dimension vector container keyed by stable integer IDs.

    IDs are assigned in insertion order (0, 1, 2, ...) and are never reused.
    Removing a vector tombstones its slot instead of compacting the storage,
    so an ID keeps referring to the same vector for the lifetime of the store.
    Both BruteForceIndex and HNSWIndex read vectors from a store by ID.

    Example:
        >>> store = VectorStore(dimension=2)
        >>> store.add([0.0, 0.0])
        0
        >>> store.add([1.0, 0.0])
        1
        >>> store.remove(0)
        >>> store.size()
        1
    """

    def __init__(self, dimension: int) -> None:
        """
        Initialize an empty store.

        Args:
            dimension: Length every stored vector must have (fixed for the store's lifetime)

        Raises:
            InvalidParameter: If dimension is not a positive integer
        """
        if isinstance(dimension, bool) or not isinstance(dimension, int) or dimension < 1:
            raise InvalidParameter(f"dimension must be a positive integer, got {dimension!r}")

        self._dimension = dimension

        # Arena indexed by ID; None marks a tombstoned slot
        self._vectors: List[Optional[Vector]] = []
        self._live_count = 0

        # Bumped on every tombstoning; lets indexes notice removals made directly on the store
        self._removal_count = 0

    @property
    def dimension(self) -> int:
        """Dimensionality of vectors in this store."""
        return self._dimension

    def add(self, vector: VectorLike) -> int:
        """
        Append a vector and return its new ID.

        Args:
            vector: Sequence of numbers or 1D numpy array of length `dimension`

        Returns:
            The ID assigned to the vector

        Raises:
            DimensionMismatch: If the vector length differs from the store dimension
            InvalidVector: If any element is non-finite
        """
        arr = validate_vector(vector, self._dimension)
        arr.setflags(write=False)

        vector_id = len(self._vectors)
        self._vectors.append(arr)
        self._live_count += 1

        logger.debug("Added vector id=%d", vector_id)
        return vector_id

    def get(self, vector_id: int) -> Vector:
        """
        Retrieve a copy of a stored vector.

        Raises:
            NotFound: If the ID is unknown or tombstoned
        """
        return self._live_vector(vector_id).copy()

    def view(self, vector_id: int) -> Vector:
        """
        Read-only view of a stored vector (no copy). Used on hot search paths.

        Raises:
            NotFound: If the ID is unknown or tombstoned
        """
        return self._live_vector(vector_id)

    def update(self, vector_id: int, vector: VectorLike) -> None:
        """
        Replace a vector in place, keeping its ID.

        Raises:
            NotFound: If the ID is unknown or tombstoned
            DimensionMismatch: If the vector length differs from the store dimension
            InvalidVector: If any element is non-finite
        """
        self._live_vector(vector_id)
        arr = validate_vector(vector, self._dimension)
        arr.setflags(write=False)
        self._vectors[vector_id] = arr

        logger.debug("Updated vector id=%d", vector_id)

    def remove(self, vector_id: int) -> None:
        """
        Tombstone a vector. Its ID is never handed out again.

        Raises:
            NotFound: If the ID is unknown or already removed
        """
        self._live_vector(vector_id)
        self._vectors[vector_id] = None
        self._live_count -= 1
        self._removal_count += 1

        logger.debug("Removed vector id=%d", vector_id)

    def clear(self) -> None:
        """Tombstone every live vector. New IDs keep counting upward."""
        for vector_id in self.ids():
            self._vectors[vector_id] = None
        self._removal_count += self._live_count
        self._live_count = 0

        logger.debug("Cleared store")

    def is_live(self, vector_id: int) -> bool:
        """Check whether an ID refers to a live (not removed) vector."""
        if isinstance(vector_id, bool) or not isinstance(vector_id, (int, np.integer)):
            return False
        return 0 <= vector_id < len(self._vectors) and self._vectors[vector_id] is not None

    def contains(self, vector_id: int) -> bool:
        """Same as is_live(); also available as `vector_id in store`."""
        return self.is_live(vector_id)

    @property
    def removal_count(self) -> int:
        """Total number of vectors tombstoned so far (remove() and clear())."""
        return self._removal_count

    def size(self) -> int:
        """Number of live vectors."""
        return self._live_count

    def ids(self) -> List[int]:
        """Live IDs in ascending order."""
        return [i for i, vec in enumerate(self._vectors) if vec is not None]

    def all_vectors(self) -> List[Vector]:
        """
        Snapshot of all live vectors in ID order.

        Returns:
            List of copies; mutating them does not affect the store
        """
        return [vec.copy() for vec in self._vectors if vec is not None]

    def next_id(self) -> int:
        """ID the next add() will assign."""
        return len(self._vectors)

    def _live_vector(self, vector_id: int) -> Vector:
        """Return the stored array (not a copy) or raise NotFound."""
        if not self.is_live(vector_id):
            raise NotFound(vector_id)
        return self._vectors[vector_id]

    def __len__(self) -> int:
        return self._live_count

    def __contains__(self, vector_id: object) -> bool:
        return self.is_live(vector_id)

    def __iter__(self) -> Iterator[Tuple[int, Vector]]:
        """Iterate over (id, vector copy) pairs of live vectors."""
        for vector_id, vec in enumerate(self._vectors):
            if vec is not None:
                yield vector_id, vec.copy()

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"VectorStore(size={self.size()}, dim={self.dimension})"
