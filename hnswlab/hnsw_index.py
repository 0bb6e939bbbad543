"""
Approximate nearest neighbor index for hnswlab.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import numpy.typing as npt

from hnswlab.config import EF_RANGE, M_RANGE, HNSWLabConfig, check_range, get_default_config
from hnswlab.exceptions import NotFound
from hnswlab.hnsw.builder import HNSWBuilder
from hnswlab.hnsw.distance import get_metric
from hnswlab.hnsw.graph import HNSWGraph
from hnswlab.hnsw.searcher import HNSWSearcher
from hnswlab.hnsw.trace import LayerTrace
from hnswlab.hnsw.utils import assign_layer
from hnswlab.results import SearchResult, format_result
from hnswlab.validation import VectorLike, validate_k, validate_vector
from hnswlab.vector_store import VectorStore

Vector = npt.NDArray[np.float64]

logger = logging.getLogger(__name__)


class HNSWIndex:
    """
    Multi-layer navigable graph index over a VectorStore.

    This is the main entry point for approximate search. It owns the HNSW graph,
    the builder that links new vectors into it and the searcher that answers
    queries. Vectors are stored in (and IDs assigned by) the VectorStore passed in,
    so IDs returned by insert() are store IDs and BruteForceIndex over the same
    store sees the same vectors.

    Each instance is independent; several indexes can share one process.

    Example:
        >>> store = VectorStore(dimension=2)
        >>> index = HNSWIndex(store, seed=42)
        >>> for vec in ([0, 0], [1, 0], [0, 1], [5, 5]):
        ...     _ = index.insert(vec)
        >>> index.search([0, 0.1], k=2)[0]["id"]
        0
        >>> index.get_search_trace()[-1].level
        0

    Mutations (insert, update, remove, configure) must not run while a search
    over the same index is in progress; callers embedding the index in a
    threaded host need their own single-writer lock.
    """

    def __init__(
        self,
        store: VectorStore,
        metric: Optional[str] = None,
        M: Optional[int] = None,
        ef_construction: Optional[int] = None,
        ef_search: Optional[int] = None,
        seed: Optional[int] = None,
        config: Optional[HNSWLabConfig] = None,
    ) -> None:
        """
        Initialize an empty index over a store.

        Args:
            store: VectorStore that will hold the indexed vectors
            metric: "euclidean" or "cosine" (default from config)
            M: Neighbors selected per layer for each new node (1-100)
            ef_construction: Candidate pool during insertion (1-1000)
            ef_search: Candidate pool during queries (1-1000)
            seed: Seed for level sampling (reproducible graphs)
            config: HNSWLabConfig supplying defaults. Explicit arguments
                    take precedence over it.

        Raises:
            InvalidParameter: If any parameter is out of range or the metric is unknown
        """
        if config is None:
            config = get_default_config()
        self.config = config

        if metric is None:
            metric = self.config.default_metric
        if M is None:
            M = self.config.default_M
        if ef_construction is None:
            ef_construction = self.config.default_ef_construction
        if ef_search is None:
            ef_search = self.config.default_ef_search

        distance_fn = get_metric(metric)
        M = check_range("M", M, M_RANGE)
        ef_construction = check_range("ef_construction", ef_construction, EF_RANGE)
        ef_search = check_range("ef_search", ef_search, EF_RANGE)

        self.store = store
        self.metric = metric
        self._rng = np.random.default_rng(seed)

        # store.removal_count as of the last sync with the store
        self._seen_removals = store.removal_count

        # Initialize HNSW components
        self._graph = HNSWGraph()
        self._searcher = HNSWSearcher(self._graph, store, distance_fn, ef_search=ef_search)
        self._builder = HNSWBuilder(
            self._graph, self._searcher, M=M, ef_construction=ef_construction
        )

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def M(self) -> int:
        """Neighbors selected per layer for new nodes."""
        return self._builder.M

    @property
    def ef_construction(self) -> int:
        """Candidate pool size used while inserting."""
        return self._builder.ef_construction

    @property
    def ef_search(self) -> int:
        """Candidate pool size used while querying."""
        return self._searcher.ef_search

    def configure(
        self,
        ef_search: Optional[int] = None,
        ef_construction: Optional[int] = None,
        M: Optional[int] = None,
    ) -> None:
        """
        Change search/construction parameters.

        All given values are validated before any is applied. Changes affect
        future inserts and searches only; existing edges are left as they are.

        Raises:
            InvalidParameter: If a value is outside its range
                (ef_search and ef_construction: 1-1000, M: 1-100)
        """
        if ef_search is not None:
            ef_search = check_range("ef_search", ef_search, EF_RANGE)
        if ef_construction is not None:
            ef_construction = check_range("ef_construction", ef_construction, EF_RANGE)
        if M is not None:
            M = check_range("M", M, M_RANGE)

        if ef_search is not None:
            self._searcher.ef_search = ef_search
        if ef_construction is not None:
            self._builder.ef_construction = ef_construction
        if M is not None:
            self._builder.M = M

        logger.info(
            "HNSW parameters: M=%d, ef_construction=%d, ef_search=%d",
            self.M, self.ef_construction, self.ef_search,
        )

    def get_config(self) -> Dict[str, Any]:
        """Current parameters of this index."""
        return {
            "M": self.M,
            "ef_construction": self.ef_construction,
            "ef_search": self.ef_search,
            "metric": self.metric,
        }

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(self, vector: VectorLike) -> int:
        """
        Add a vector to the store and link it into the graph.

        Args:
            vector: Vector of length store.dimension

        Returns:
            The ID assigned by the store

        Raises:
            DimensionMismatch: If the vector length differs from the store dimension
            InvalidVector: If any element is non-finite
        """
        node_id = self.store.add(vector)
        self._link(node_id)
        return node_id

    def index_existing(self) -> List[int]:
        """
        Link live store vectors that are not in the graph yet.

        Useful when the index is created over a store that already holds vectors.

        Returns:
            IDs newly indexed, ascending
        """
        self._sync_with_store()
        new_ids = [
            vector_id for vector_id in self.store.ids()
            if not self._graph.is_live(vector_id) and vector_id not in self._graph.removed
        ]
        for vector_id in new_ids:
            self._link(vector_id)

        logger.debug("Indexed %d existing vectors", len(new_ids))
        return new_ids

    def update(self, node_id: int, vector: VectorLike) -> None:
        """
        Replace a vector and re-link its node under the same ID.

        The node gets a freshly sampled level and new edges; references to it
        held by other nodes are dropped first.

        Raises:
            NotFound: If the ID is not a live node
            DimensionMismatch: If the vector length differs from the store dimension
            InvalidVector: If any element is non-finite
        """
        self._sync_with_store()
        if not self._graph.is_live(node_id):
            raise NotFound(node_id)

        self.store.update(node_id, vector)

        for node in self._graph.nodes.values():
            for layer_neighbors in node.neighbors.values():
                layer_neighbors.discard(node_id)

        self._graph.remove_node(node_id)
        self._link(node_id)

    def remove(self, node_id: int) -> None:
        """
        Tombstone a node and its store slot.

        Other nodes keep stale references to the ID; searches skip them.
        If the node was the entry point, the lowest live ID at the highest
        remaining level becomes the entry point.

        Removing the vector directly from the store has the same effect on
        the index (picked up on its next operation).

        Raises:
            NotFound: If the ID is not a live node
        """
        self._sync_with_store()
        if not self._graph.is_live(node_id):
            raise NotFound(node_id)

        self._graph.remove_node(node_id)
        self.store.remove(node_id)
        self._seen_removals = self.store.removal_count

        logger.debug("Removed node %d (entry point now %s)", node_id, self._graph.entry_point)

    def rebuild_level_neighbors(self) -> None:
        """
        Re-materialize every live node's per-layer neighbor sets.

        Each node's neighbors across all layers are pooled; at layer L the node
        keeps the pooled neighbors that are live and have level >= L. This drops
        references to removed nodes and lifts edges between two high-level nodes
        onto every layer they share.
        """
        self._sync_with_store()
        pooled = {
            node_id: node.all_neighbors()
            for node_id, node in self._graph.nodes.items()
        }

        for node_id, node in self._graph.nodes.items():
            for layer in range(node.level + 1):
                node.neighbors[layer] = {
                    neighbor_id for neighbor_id in pooled[node_id]
                    if self._graph.is_live(neighbor_id)
                    and self._graph.level_of(neighbor_id) >= layer
                }

        logger.debug("Rebuilt level neighbors for %d nodes", self._graph.size())

    def _sync_with_store(self) -> None:
        """Tombstone graph nodes whose store slot was removed behind the index's back."""
        removals = self.store.removal_count
        if removals == self._seen_removals:
            return

        dead = [node_id for node_id in self._graph.nodes if not self.store.is_live(node_id)]
        for node_id in dead:
            self._graph.remove_node(node_id)
        self._seen_removals = removals

        if dead:
            logger.debug(
                "Dropped %d nodes removed from the store (entry point now %s)",
                len(dead), self._graph.entry_point,
            )

    def _link(self, node_id: int) -> None:
        self._sync_with_store()
        level = assign_layer(
            self._rng,
            probability=self.config.level_probability,
            max_level=self.config.max_level,
        )
        self._builder.insert(self.store.view(node_id), node_id=node_id, level=level)
        logger.debug("Inserted node %d at level %d", node_id, level)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query: VectorLike, k: int = 1) -> List[SearchResult]:
        """
        Approximate k nearest neighbors.

        Overwrites the search trace (see get_search_trace()).

        Args:
            query: Query vector of length store.dimension
            k: Number of results to return

        Returns:
            Up to k result dicts {'id', 'vector', 'distance', 'similarity'}
            sorted by distance ascending; empty if the index has no live node.
            'similarity' is only set for the cosine metric.

        Raises:
            DimensionMismatch: If the query length differs from the store dimension
            InvalidVector: If the query has non-finite elements
            InvalidParameter: If k < 1
        """
        k = validate_k(k)
        query_vec = validate_vector(query, self.store.dimension)

        self._sync_with_store()
        results = self._searcher.search(query_vec, k)

        return [
            format_result(node_id, self.store.view(node_id), distance, self.metric)
            for node_id, distance in results
        ]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_search_trace(self) -> List[LayerTrace]:
        """
        Per-layer record of the last search() call, top layer first.

        Valid until the next search(); returns a copy.
        """
        return copy.deepcopy(self._searcher.last_trace)

    def get_last_layer_trace(self) -> Optional[LayerTrace]:
        """Layer-0 record of the last search, or None before any search."""
        if not self._searcher.last_trace:
            return None
        return copy.deepcopy(self._searcher.last_trace[-1])

    def get_trace_stats(self) -> Optional[Dict[str, int]]:
        """
        Summary of the last search trace.

        Returns:
            Dict with 'total_levels', 'final_level_steps', 'total_visited_nodes'
            (the last two for layer 0), or None before any search
        """
        if not self._searcher.last_trace:
            return None

        last_layer = self._searcher.last_trace[-1]
        return {
            "total_levels": len(self._searcher.last_trace),
            "final_level_steps": len(last_layer.steps),
            "total_visited_nodes": len(last_layer.final_results),
        }

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the graph.

        Returns:
            Dictionary with 'total_vectors' (live nodes), 'max_level' (-1 if empty),
            'average_neighbors' (distinct live neighbors per live node, all layers)
            and 'entry_point'
        """
        self._sync_with_store()
        total = self._graph.size()
        neighbor_total = sum(
            sum(1 for n in node.all_neighbors() if self._graph.is_live(n))
            for node in self._graph.nodes.values()
        )

        return {
            "total_vectors": total,
            "max_level": self._graph.get_max_level(),
            "average_neighbors": neighbor_total / total if total > 0 else 0.0,
            "entry_point": self._graph.entry_point,
        }

    def get_level_nodes(self, level: int) -> List[int]:
        """Live node IDs whose level is >= the given level, ascending."""
        self._sync_with_store()
        return sorted(
            node_id for node_id, node in self._graph.nodes.items() if node.level >= level
        )

    def get_level_connections(self, level: int) -> List[Tuple[int, int]]:
        """
        Undirected edges among live nodes at a layer.

        Returns:
            Sorted list of (lower_id, higher_id) pairs, each edge once
        """
        edges = set()
        for node_id in self.get_level_nodes(level):
            for neighbor_id in self._graph.live_neighbors(node_id, level):
                edges.add((min(node_id, neighbor_id), max(node_id, neighbor_id)))
        return sorted(edges)

    def get_current_node_neighbors(self, node_id: int, level: int = 0) -> List[Dict[str, Any]]:
        """
        Live neighbors of a node at a layer, with their distance to the node.

        Returns:
            List of {'id', 'distance'} dicts in ascending ID order; empty if the
            node is unknown, removed, or its level is below the layer
        """
        self._sync_with_store()
        if not self._graph.is_live(node_id):
            return []

        node_vector = self.store.view(node_id)
        return [
            {
                "id": neighbor_id,
                "distance": self._searcher.distance_fn(node_vector, self.store.view(neighbor_id)),
            }
            for neighbor_id in self._graph.live_neighbors(node_id, level)
        ]

    def get_level_distribution(self) -> Dict[int, int]:
        """Number of live nodes present at each layer (level >= layer)."""
        self._sync_with_store()
        distribution: Dict[int, int] = {}
        for layer in range(self._graph.get_max_level() + 1):
            distribution[layer] = len(self.get_level_nodes(layer))
        return distribution

    def get_node_debug(self, node_id: int) -> Dict[str, Any]:
        """
        Raw per-layer neighbor sets of a node, stale references included.

        Raises:
            NotFound: If the ID is not a live node
        """
        self._sync_with_store()
        node = self._graph.get_node(node_id)
        if node is None:
            raise NotFound(node_id)

        return {
            "id": node_id,
            "level": node.level,
            "neighbors": {layer: sorted(ids) for layer, ids in node.neighbors.items()},
        }

    def size(self) -> int:
        """Number of live nodes in the graph."""
        self._sync_with_store()
        return self._graph.size()

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"HNSWIndex(nodes={self.size()}, max_level={self._graph.get_max_level()}, "
            f"M={self.M}, ef_construction={self.ef_construction}, "
            f"ef_search={self.ef_search}, metric={self.metric})"
        )
