"""
HNSW graph construction and insertion logic.

This module handles adding new nodes to the HNSW graph. The insertion algorithm:
1. Adds the node (with its pre-assigned level) to the graph, unconnected
2. On every layer the node shares with the current graph, top-down, searches
   from the entry point with the ef_construction pool
3. Connects the node to the M closest nodes found, in both directions
4. Promotes the node to entry point if its level beats the current maximum

Neighbor selection is plain closest-M truncation and existing nodes are never
pruned, so a node's degree at a layer can grow beyond M as later nodes link to it.
"""

import logging

import numpy as np
import numpy.typing as npt

from hnswlab.hnsw.graph import HNSWGraph
from hnswlab.hnsw.searcher import HNSWSearcher
from hnswlab.hnsw.utils import select_neighbors_simple

Vector = npt.NDArray[np.float64]

logger = logging.getLogger(__name__)


class HNSWBuilder:
    """
    Handles insertion of nodes into the HNSW graph.

    This class encapsulates the logic for linking new vectors into the index,
    including neighbor search and connection creation.
    """

    def __init__(
        self,
        graph: HNSWGraph,
        searcher: HNSWSearcher,
        M: int = 4,
        ef_construction: int = 100,
    ) -> None:
        """
        Initialize builder with a graph to operate on.

        Args:
            graph: The HNSWGraph to insert nodes into
            searcher: Layer searcher over the same graph
            M: Neighbors selected per layer for each new node
            ef_construction: Candidate pool size for the insertion searches
        """
        self.graph = graph
        self.searcher = searcher
        self.M = M
        self.ef_construction = ef_construction

    def insert(self, vector: Vector, node_id: int, level: int) -> None:
        """
        Insert a new node into the graph at a specific level.

        Args:
            vector: Vector data for the new node (already stored under node_id)
            node_id: ID of the node (shared with the VectorStore)
            level: Maximum layer for this node
        """
        entry_point = self.graph.entry_point
        previous_max_level = self.graph.get_max_level()

        self.graph.add_node(node_id, level)

        # First live node: it is the entry point and has nobody to link to
        if entry_point is None:
            logger.debug("Node %d is the first live node (level %d)", node_id, level)
            return

        for layer in range(min(level, previous_max_level), -1, -1):
            visited = self.searcher.search_layer(
                vector, entry_point, layer, self.ef_construction
            )

            candidates = [nid for nid, _ in visited if nid != node_id]
            distances = [dist for nid, dist in visited if nid != node_id]
            neighbors = select_neighbors_simple(candidates, distances, self.M)

            for neighbor_id in neighbors:
                self.graph.add_edge(node_id, neighbor_id, layer)

        if level > previous_max_level:
            self.graph.entry_point = node_id
            logger.debug("Node %d is the new entry point (level %d)", node_id, level)
