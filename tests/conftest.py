"""
Pytest configuration and shared fixtures for hnswlab tests
"""

import pytest
import numpy as np

from hnswlab import HNSWIndex, VectorStore


@pytest.fixture
def sample_vectors() -> np.ndarray:
    """Generate sample vectors for testing."""
    rng = np.random.default_rng(42)
    return rng.random((50, 8))


@pytest.fixture
def dimension() -> int:
    """Standard vector dimension for testing."""
    return 8


@pytest.fixture
def square_store() -> VectorStore:
    """2D store holding [0,0], [1,0], [0,1], [5,5] as ids 0-3."""
    store = VectorStore(dimension=2)
    for vec in ([0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [5.0, 5.0]):
        store.add(vec)
    return store


@pytest.fixture
def populated_index(sample_vectors) -> HNSWIndex:
    """HNSW index over the sample vectors with a generous configuration."""
    store = VectorStore(dimension=sample_vectors.shape[1])
    index = HNSWIndex(store, M=16, ef_construction=200, ef_search=100, seed=7)
    for vec in sample_vectors:
        index.insert(vec)
    return index
