"""
Utility functions for HNSW graph construction.

This module provides helper functions used during HNSW index building:
- Layer assignment: Determines which layers a new node should appear in
- Neighbor selection: Chooses which edges to create for a new node

The layer assignment flips a coin repeatedly, so each extra level is half as likely
as the one below it. Most nodes only live in layer 0 and progressively fewer reach
higher layers, which gives the search a sparse "express lane" at the top.
"""

from typing import List, Optional

import numpy as np

DEFAULT_MAX_LEVEL = 10
DEFAULT_LEVEL_PROBABILITY = 0.5


def assign_layer(
    rng: Optional[np.random.Generator] = None,
    probability: float = DEFAULT_LEVEL_PROBABILITY,
    max_level: int = DEFAULT_MAX_LEVEL,
) -> int:
    """
    Randomly assign a layer for a new node by repeated coin flips.

    Starting at level 0, the level is incremented while a flip with success
    `probability` succeeds, up to `max_level`. With probability 0.5:
    P(level >= l) = 0.5^l, so ~50% of nodes stay at layer 0, ~25% reach layer 1, ...

    Args:
        rng: Random generator (a fresh unseeded one if None)
        probability: Chance of promoting one more level on each flip
        max_level: Hard cap on the returned level

    Returns:
        Layer number in [0, max_level]

    Example:
        >>> rng = np.random.default_rng(0)
        >>> layers = [assign_layer(rng) for _ in range(10000)]
        >>> layers.count(0) / 10000  # Should be ~0.5
    """
    if rng is None:
        rng = np.random.default_rng()

    level = 0
    while level < max_level and rng.random() < probability:
        level += 1

    return level


def select_neighbors_simple(
    candidates: List[int], distances: List[float], M: int
) -> List[int]:
    """
    Select M nearest neighbors from candidates based on distances.

    This is the "simple" neighbor selection strategy - just pick the M closest nodes.
    Ties on distance go to the lower ID so construction is reproducible.

    Args:
        candidates: List of node IDs
        distances: List of distances (parallel to candidates, lower = closer)
        M: Maximum number of neighbors to select

    Returns:
        List of selected node IDs (up to M nodes, sorted by distance)

    Example:
        >>> candidates = [10, 20, 30, 40]
        >>> distances = [0.5, 0.2, 0.8, 0.3]
        >>> select_neighbors_simple(candidates, distances, M=2)
        [20, 40]  # The two closest nodes
    """
    if len(candidates) == 0:
        return []

    # Sort by distance, then ID
    paired = sorted(zip(candidates, distances), key=lambda x: (x[1], x[0]))

    return [node_id for node_id, _ in paired[:M]]
