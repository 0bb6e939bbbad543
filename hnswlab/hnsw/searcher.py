"""
HNSW search algorithm.

This module handles querying the HNSW graph to find approximate nearest neighbors.
The search algorithm:
1. Starts at the entry point (top layer)
2. Runs a bounded best-first search on each layer, handing the nearest node found
   down as the entry point of the layer below
3. At layer 0, runs the same search and returns the k nearest visited nodes

Every layer is searched with the full ef_search pool, not the ef=1 greedy walk
of canonical HNSW, and each layer search reports every node it visited
rather than only the ef-bounded frontier. Both choices keep the search trace and
the returned results describing the same set of nodes.

The ef_search parameter controls the accuracy-speed tradeoff:
- Higher ef_search = better recall, slower search
- Lower ef_search = faster search, lower recall
"""

from typing import Callable, Dict, List, Optional, Set, Tuple

import numpy as np
import numpy.typing as npt

from hnswlab.hnsw.graph import HNSWGraph
from hnswlab.hnsw.trace import LayerTrace, SearchStep
from hnswlab.vector_store import VectorStore

Vector = npt.NDArray[np.float64]
DistanceFunction = Callable[[Vector, Vector], float]


class HNSWSearcher:
    """
    Handles layer searches and k-NN queries on the HNSW graph.

    The same search_layer() routine serves insertion (with ef_construction) and
    querying (with ef_search).
    """

    def __init__(
        self,
        graph: HNSWGraph,
        store: VectorStore,
        distance_fn: DistanceFunction,
        ef_search: int = 10,
    ) -> None:
        """
        Initialize searcher with a graph.

        Args:
            graph: The HNSWGraph to search in
            store: VectorStore holding the vectors behind graph node IDs
            distance_fn: Metric used for every comparison
            ef_search: Size of candidate pool during queries (higher = better recall)
        """
        self.graph = graph
        self.store = store
        self.distance_fn = distance_fn
        self.ef_search = ef_search

        # Trace of the most recent search() call
        self.last_trace: List[LayerTrace] = []

    def search(self, query: Vector, k: int) -> List[Tuple[int, float]]:
        """
        Search for k nearest neighbors to the query vector.

        Resets last_trace and records one LayerTrace per layer traversed.

        Args:
            query: Query vector to search for
            k: Number of nearest neighbors to return

        Returns:
            List of (node_id, distance) tuples, sorted by distance (closest first)
        """
        self.last_trace = []

        if self.graph.entry_point is None:
            return []

        current_entry = self.graph.entry_point

        # Upper layers: the nearest visited node seeds the next layer down
        for layer in range(self.graph.get_max_level(), 0, -1):
            layer_results = self.search_layer(
                query, current_entry, layer, self.ef_search, trace=self.last_trace
            )
            current_entry = layer_results[0][0]

        results = self.search_layer(
            query, current_entry, 0, self.ef_search, trace=self.last_trace
        )
        return results[:k]

    def search_layer(
        self,
        query: Vector,
        entry_id: int,
        layer: int,
        ef: int,
        trace: Optional[List[LayerTrace]] = None,
    ) -> List[Tuple[int, float]]:
        """
        Bounded best-first search on a single layer.

        Repeatedly expands the candidate closest to the query. Newly seen
        neighbors are marked visited and become candidates; whenever there are
        more than ef candidates the farthest one is dropped. Stops when no
        candidates remain.

        Args:
            query: Query vector to search for
            entry_id: Live node to start from
            layer: Which layer to search on
            ef: Maximum size of the candidate pool
            trace: If given, a LayerTrace for this search is appended to it

        Returns:
            Every visited node as (node_id, distance), sorted by (distance, id)
        """
        distances: Dict[int, float] = {}

        def distance_to(node_id: int) -> float:
            if node_id not in distances:
                distances[node_id] = self.distance_fn(query, self.store.view(node_id))
            return distances[node_id]

        def rank(node_id: int) -> Tuple[float, int]:
            return distance_to(node_id), node_id

        visited: Set[int] = {entry_id}
        candidates: Set[int] = {entry_id}

        layer_trace = None
        if trace is not None:
            layer_trace = LayerTrace(level=layer, entry_point=entry_id, ef=ef)

        step = 0
        while candidates:
            step += 1
            current = min(candidates, key=rank)
            candidates.remove(current)

            search_step = None
            if layer_trace is not None:
                search_step = SearchStep(
                    step=step,
                    current_node=current,
                    current_distance=distance_to(current),
                    candidates_snapshot=sorted(candidates),
                    visited_snapshot=sorted(visited),
                )

            for neighbor_id in self.graph.live_neighbors(current, layer):
                if neighbor_id in visited:
                    continue

                dist = distance_to(neighbor_id)
                visited.add(neighbor_id)
                candidates.add(neighbor_id)

                if search_step is not None:
                    search_step.checked_neighbors.append((neighbor_id, dist))

                # Keep the candidate pool bounded by ef
                if len(candidates) > ef:
                    candidates.remove(max(candidates, key=rank))

            if layer_trace is not None:
                layer_trace.steps.append(search_step)

        results = sorted(((node_id, distance_to(node_id)) for node_id in visited),
                         key=lambda x: (x[1], x[0]))

        if layer_trace is not None:
            layer_trace.final_results = list(results)
            trace.append(layer_trace)

        return results
