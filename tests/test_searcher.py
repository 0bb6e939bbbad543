"""
Tests for HNSW search algorithm.

These tests verify that the searcher correctly explores the graph:
- Empty graph handling
- Layer search returns every visited node, sorted
- ef bounds the candidate pool (and therefore how far the search reaches)
- Removed nodes are skipped
- Trace records match what the search did
"""

import numpy as np
import pytest
from hnswlab import VectorStore
from hnswlab.hnsw.distance import euclidean_distance
from hnswlab.hnsw.graph import HNSWGraph
from hnswlab.hnsw.searcher import HNSWSearcher


def make_graph(points, levels=None, edges=()):
    """Build a graph by hand: edges are (a, b, layer) triples."""
    store = VectorStore(dimension=len(points[0]))
    graph = HNSWGraph()
    levels = levels or [0] * len(points)

    for vec, level in zip(points, levels):
        node_id = store.add(vec)
        graph.add_node(node_id, level)

    for a, b, layer in edges:
        graph.add_edge(a, b, layer)

    searcher = HNSWSearcher(graph, store, euclidean_distance, ef_search=10)
    return store, graph, searcher


def test_search_empty_graph():
    """Searching an empty graph should return empty results and an empty trace"""
    store = VectorStore(dimension=2)
    searcher = HNSWSearcher(HNSWGraph(), store, euclidean_distance, ef_search=10)

    assert searcher.search(np.array([1.0, 0.0]), k=5) == []
    assert searcher.last_trace == []


def test_search_single_node():
    """Searching with one node should return that node"""
    _, _, searcher = make_graph([[1.0, 0.0]])

    results = searcher.search(np.array([0.9, 0.1]), k=5)

    assert len(results) == 1
    assert results[0][0] == 0
    assert results[0][1] == pytest.approx(np.hypot(0.1, 0.1))


def test_search_layer_returns_all_visited_sorted():
    """Even with ef=1 a chain is walked to the end and every node is reported"""
    points = [[float(i), 0.0] for i in range(6)]
    chain = [(i, i + 1, 0) for i in range(5)]
    _, _, searcher = make_graph(points, edges=chain)

    results = searcher.search_layer(np.array([5.0, 0.0]), entry_id=0, layer=0, ef=1)

    assert [node_id for node_id, _ in results] == [5, 4, 3, 2, 1, 0]
    assert [d for _, d in results] == pytest.approx([0.0, 1.0, 2.0, 3.0, 4.0, 5.0])


def test_ef_evicts_farthest_candidate():
    """A candidate evicted for exceeding ef is never expanded"""
    points = [[0.0, 0.0], [1.0, 0.0], [5.0, 0.0], [6.0, 0.0]]
    edges = [(0, 1, 0), (0, 2, 0), (2, 3, 0)]
    _, _, searcher = make_graph(points, edges=edges)
    query = np.array([0.0, 0.0])

    narrow = searcher.search_layer(query, entry_id=0, layer=0, ef=1)
    wide = searcher.search_layer(query, entry_id=0, layer=0, ef=10)

    # Node 2 was visited but evicted, so node 3 behind it was never reached
    assert [node_id for node_id, _ in narrow] == [0, 1, 2]
    assert [node_id for node_id, _ in wide] == [0, 1, 2, 3]


def test_search_layer_skips_removed_nodes():
    points = [[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]]
    edges = [(0, 1, 0), (0, 2, 0)]
    _, graph, searcher = make_graph(points, edges=edges)

    graph.remove_node(1)
    results = searcher.search_layer(np.array([1.0, 0.0]), entry_id=0, layer=0, ef=10)

    assert sorted(node_id for node_id, _ in results) == [0, 2]


def test_search_layer_ignores_lower_level_neighbors():
    """At layer 1 only neighbors with level >= 1 are expanded"""
    points = [[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]]
    _, graph, searcher = make_graph(points, levels=[1, 0, 1], edges=[(0, 2, 1)])
    graph.add_edge(0, 1, 0)
    graph.get_node(0).neighbors[1].add(1)  # stale upper-layer reference

    results = searcher.search_layer(np.array([1.0, 0.0]), entry_id=0, layer=1, ef=10)

    assert sorted(node_id for node_id, _ in results) == [0, 2]


def test_search_returns_k_closest():
    """Search should return nodes sorted by distance (closest first)"""
    points = [[1.0, 0.0], [0.0, 1.0], [0.9, 0.1]]
    edges = [(0, 1, 0), (0, 2, 0), (1, 2, 0)]
    _, _, searcher = make_graph(points, edges=edges)

    results = searcher.search(np.array([1.0, 0.0]), k=2)

    assert [node_id for node_id, _ in results] == [0, 2]
    assert results[0][1] == 0.0


def test_trace_records_each_step():
    points = [[0.0, 0.0], [1.0, 0.0], [5.0, 0.0]]
    edges = [(0, 1, 0), (0, 2, 0)]
    _, _, searcher = make_graph(points, edges=edges)

    searcher.search(np.array([0.0, 0.0]), k=2)

    assert len(searcher.last_trace) == 1
    layer_trace = searcher.last_trace[0]
    assert layer_trace.level == 0
    assert layer_trace.entry_point == 0
    assert layer_trace.ef == 10

    first = layer_trace.steps[0]
    assert first.step == 1
    assert first.current_node == 0
    assert first.current_distance == 0.0
    assert first.candidates_snapshot == []
    assert first.visited_snapshot == [0]
    assert [nid for nid, _ in first.checked_neighbors] == [1, 2]
    assert [d for _, d in first.checked_neighbors] == pytest.approx([1.0, 5.0])

    # Nodes 1 and 2 are expanded next, closest first, finding nothing new
    assert [s.current_node for s in layer_trace.steps] == [0, 1, 2]
    assert layer_trace.steps[1].candidates_snapshot == [2]
    assert layer_trace.steps[1].visited_snapshot == [0, 1, 2]
    assert layer_trace.steps[1].checked_neighbors == []

    assert [nid for nid, _ in layer_trace.final_results] == [0, 1, 2]


def test_trace_descends_through_layers():
    """One record per layer, top first; each layer starts from the previous nearest"""
    points = [[0.0, 0.0], [4.0, 0.0], [10.0, 0.0], [3.5, 0.0]]
    levels = [2, 1, 0, 0]
    edges = [
        (0, 1, 1),
        (0, 1, 0), (1, 2, 0), (1, 3, 0),
    ]
    _, graph, searcher = make_graph(points, levels=levels, edges=edges)
    assert graph.entry_point == 0

    results = searcher.search(np.array([3.6, 0.0]), k=1)

    assert [t.level for t in searcher.last_trace] == [2, 1, 0]
    assert searcher.last_trace[0].entry_point == 0
    assert searcher.last_trace[1].entry_point == 0
    assert searcher.last_trace[2].entry_point == 1
    assert results[0][0] == 3


def test_final_layer_results_match_search_output():
    rng = np.random.default_rng(4)
    points = rng.normal(size=(12, 3)).tolist()
    edges = [(i, j, 0) for i in range(12) for j in range(i + 1, 12) if (i + j) % 3 == 0]
    _, _, searcher = make_graph(points, edges=edges)

    results = searcher.search(np.zeros(3), k=4)

    assert searcher.last_trace[-1].final_results[:4] == results


def test_trace_reset_between_searches():
    points = [[0.0], [1.0]]
    _, _, searcher = make_graph(points, levels=[1, 1], edges=[(0, 1, 0), (0, 1, 1)])

    searcher.search(np.array([0.0]), k=1)
    searcher.search(np.array([1.0]), k=1)

    assert len(searcher.last_trace) == 2
    assert searcher.last_trace[-1].final_results[0][0] == 1
