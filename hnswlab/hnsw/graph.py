"""
HNSW graph data structures.

This module defines the core data structures for storing the HNSW graph:
- HNSWNode: A single node (vector ID) with its per-layer connections
- HNSWGraph: Arena of all nodes, the removed-ID set and the entry point

The graph is hierarchical: nodes at layer 0 form a dense graph with all vectors,
while higher layers contain progressively fewer nodes for faster coarse-grained search.
Vectors themselves live in the VectorStore; the graph only holds IDs.

Removal is a tombstone: the node leaves the arena but other nodes may still list
its ID as a neighbor. Traversal skips such IDs via is_live(), so stale references
are harmless until rebuild_level_neighbors() purges them.
"""

import logging
from typing import Dict, List, Optional, Set

logger = logging.getLogger(__name__)


class HNSWNode:
    """
    Represents a single node in the HNSW graph.

    The node appears in layers 0 through its assigned 'level' (higher levels are sparser)
    and owns one neighbor set per layer it appears in.
    """

    __slots__ = ("id", "level", "neighbors")

    def __init__(self, node_id: int, level: int) -> None:
        """
        Create a new HNSW node.

        Args:
            node_id: ID shared with the VectorStore
            level: Maximum layer this node appears in (0 = base layer only)
        """
        self.id = node_id
        self.level = level

        # Neighbors organized by layer: {layer_num: {neighbor_id, ...}}
        self.neighbors: Dict[int, Set[int]] = {layer: set() for layer in range(level + 1)}

    def add_neighbor(self, neighbor_id: int, layer: int) -> None:
        """
        Add a connection to another node at a specific layer.

        Raises:
            ValueError: If layer is above this node's level or the edge is a self-loop
        """
        if layer > self.level:
            raise ValueError(
                f"Cannot add neighbor at layer {layer} (node max level is {self.level})"
            )
        if neighbor_id == self.id:
            raise ValueError(f"Node {self.id} cannot be its own neighbor")

        self.neighbors[layer].add(neighbor_id)

    def get_neighbors(self, layer: int) -> Set[int]:
        """
        Get all neighbors at a specific layer (raw, may include removed IDs).

        Returns:
            Set of neighbor IDs, empty if layer is above this node's level
        """
        if layer > self.level:
            return set()

        return self.neighbors[layer]

    def all_neighbors(self) -> Set[int]:
        """Union of neighbors across every layer."""
        result: Set[int] = set()
        for layer_neighbors in self.neighbors.values():
            result |= layer_neighbors
        return result

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"HNSWNode(id={self.id}, level={self.level})"


class HNSWGraph:
    """
    Arena of HNSW nodes keyed by ID.

    Tracks the entry point for searches. A node is live while it is in `nodes`;
    removed IDs are remembered in `removed` so they are never re-added by accident.
    """

    def __init__(self) -> None:
        """Initialize an empty HNSW graph."""
        # Live nodes only
        self.nodes: Dict[int, HNSWNode] = {}

        # Tombstoned IDs
        self.removed: Set[int] = set()

        # Entry point: a node at the highest layer, where searches begin
        # None when graph has no live node
        self.entry_point: Optional[int] = None

    def add_node(self, node_id: int, level: int) -> HNSWNode:
        """
        Add a new, unconnected node.

        The first live node becomes the entry point. Promoting a later node to
        entry point is left to the caller (after it has been connected).

        Raises:
            ValueError: If the ID is already live
        """
        if node_id in self.nodes:
            raise ValueError(f"Node {node_id} already exists")

        node = HNSWNode(node_id, level)
        self.nodes[node_id] = node
        self.removed.discard(node_id)

        if self.entry_point is None:
            self.entry_point = node_id

        return node

    def get_node(self, node_id: int) -> Optional[HNSWNode]:
        """
        Retrieve a live node by its ID.

        Returns:
            The HNSWNode, or None if unknown or removed
        """
        return self.nodes.get(node_id)

    def is_live(self, node_id: int) -> bool:
        """Check whether a node is present and not removed."""
        return node_id in self.nodes

    def level_of(self, node_id: int) -> Optional[int]:
        """Level of a node, or None if it is unknown or removed."""
        node = self.nodes.get(node_id)
        return None if node is None else node.level

    def add_edge(self, node1_id: int, node2_id: int, layer: int) -> None:
        """
        Create a bidirectional connection between two nodes at a specific layer.

        Raises:
            ValueError: If either node is not live or lacks the layer
        """
        node1 = self.nodes.get(node1_id)
        node2 = self.nodes.get(node2_id)

        if node1 is None or node2 is None:
            raise ValueError(f"Node not found: {node1_id} or {node2_id}")

        node1.add_neighbor(node2_id, layer)
        node2.add_neighbor(node1_id, layer)

    def live_neighbors(self, node_id: int, layer: int) -> List[int]:
        """
        Neighbors usable for traversal at a layer, in ascending ID order.

        Skips removed IDs and neighbors whose own level is below the layer.
        """
        node = self.nodes.get(node_id)
        if node is None:
            return []

        result = []
        for neighbor_id in sorted(node.get_neighbors(layer)):
            neighbor = self.nodes.get(neighbor_id)
            if neighbor is not None and neighbor.level >= layer:
                result.append(neighbor_id)
        return result

    def remove_node(self, node_id: int) -> None:
        """
        Tombstone a node: drop it from the arena and clear its own edges.

        Other nodes keep their references to node_id. If the node was the entry
        point, the lowest live ID at the highest remaining level takes over.

        Raises:
            KeyError: If the node is not live
        """
        node = self.nodes.pop(node_id)
        node.neighbors.clear()
        self.removed.add(node_id)

        if self.entry_point == node_id:
            self.entry_point = self._find_entry_point()
            logger.debug("Entry point %d removed, new entry point %s", node_id, self.entry_point)

    def _find_entry_point(self) -> Optional[int]:
        """Lowest live ID among nodes at the maximum live level."""
        entry_id = None
        max_level = -1

        for node_id in sorted(self.nodes):
            level = self.nodes[node_id].level
            if level > max_level:
                max_level = level
                entry_id = node_id

        return entry_id

    def get_max_level(self) -> int:
        """
        Get the maximum layer level in the graph (level of entry point).

        Returns:
            Maximum layer number, or -1 if graph is empty
        """
        if self.entry_point is None:
            return -1

        return self.nodes[self.entry_point].level

    def size(self) -> int:
        """Number of live nodes."""
        return len(self.nodes)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"HNSWGraph(nodes={self.size()}, removed={len(self.removed)}, "
            f"max_level={self.get_max_level()})"
        )
