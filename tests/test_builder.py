"""
Tests for HNSW insertion algorithm.

These tests verify that the builder correctly inserts nodes into the graph:
- First node insertion (special case)
- Multiple node insertion with connections
- Closest-M neighbor selection
- Entry point promotion and layer restriction of edges
"""

import numpy as np
from hnswlab import VectorStore
from hnswlab.hnsw.builder import HNSWBuilder
from hnswlab.hnsw.distance import euclidean_distance
from hnswlab.hnsw.graph import HNSWGraph
from hnswlab.hnsw.searcher import HNSWSearcher


def make_builder(dimension=2, M=4, ef_construction=100):
    store = VectorStore(dimension=dimension)
    graph = HNSWGraph()
    searcher = HNSWSearcher(graph, store, euclidean_distance, ef_search=10)
    builder = HNSWBuilder(graph, searcher, M=M, ef_construction=ef_construction)
    return store, graph, builder


def insert(store, builder, vector, level):
    node_id = store.add(vector)
    builder.insert(store.view(node_id), node_id=node_id, level=level)
    return node_id


def test_insert_first_node():
    """Insert the first node into an empty graph"""
    store, graph, builder = make_builder(dimension=3)

    insert(store, builder, [1.0, 0.0, 0.0], level=2)

    assert graph.size() == 1
    assert graph.entry_point == 0
    assert graph.get_max_level() == 2

    # First node has no neighbors
    node = graph.get_node(0)
    assert node.get_neighbors(0) == set()
    assert node.get_neighbors(1) == set()
    assert node.get_neighbors(2) == set()


def test_insert_two_nodes():
    """Insert two nodes and verify they connect on both shared layers"""
    store, graph, builder = make_builder()

    insert(store, builder, [1.0, 0.0], level=1)
    insert(store, builder, [0.9, 0.1], level=1)

    node0 = graph.get_node(0)
    node1 = graph.get_node(1)

    assert 1 in node0.get_neighbors(0), "Node 0 should connect to node 1 at layer 0"
    assert 0 in node1.get_neighbors(0), "Node 1 should connect to node 0 at layer 0"
    assert 1 in node0.get_neighbors(1), "Node 0 should connect to node 1 at layer 1"
    assert 0 in node1.get_neighbors(1), "Node 1 should connect to node 0 at layer 1"


def test_higher_level_node_becomes_entry_point():
    """A node above the current max links only on existing layers, then takes over"""
    store, graph, builder = make_builder()

    insert(store, builder, [0.0, 0.0], level=0)
    insert(store, builder, [1.0, 0.0], level=3)

    assert graph.entry_point == 1
    assert graph.get_max_level() == 3

    node1 = graph.get_node(1)
    assert node1.get_neighbors(0) == {0}
    assert node1.get_neighbors(1) == set()
    assert node1.get_neighbors(3) == set()


def test_lower_level_node_keeps_entry_point():
    store, graph, builder = make_builder()

    insert(store, builder, [0.0, 0.0], level=2)
    insert(store, builder, [1.0, 0.0], level=1)
    insert(store, builder, [2.0, 0.0], level=2)

    assert graph.entry_point == 0


def test_insert_multiple_nodes():
    """Insert several nodes and verify every later node gets neighbors"""
    store, graph, builder = make_builder()

    vectors = [[1.0, 0.0], [0.9, 0.1], [0.8, 0.2], [0.0, 1.0], [0.1, 0.9]]
    levels = [0, 1, 0, 0, 0]

    for vec, lvl in zip(vectors, levels):
        insert(store, builder, vec, lvl)

    assert graph.size() == 5
    for i in range(1, 5):
        assert len(graph.get_node(i).get_neighbors(0)) > 0, f"Node {i} should have neighbors"


def test_new_node_gets_exactly_M_closest():
    """With a wide ef_construction the new node links to the true M nearest"""
    rng = np.random.default_rng(3)
    points = rng.normal(size=(30, 2))
    store, graph, builder = make_builder(M=3, ef_construction=1000)

    for vec in points:
        insert(store, builder, vec, level=0)

    new_id = insert(store, builder, [0.05, -0.02], level=0)

    distances = [euclidean_distance(np.array([0.05, -0.02]), p) for p in points]
    expected = set(np.argsort(distances, kind="stable")[:3].tolist())

    assert graph.get_node(new_id).get_neighbors(0) == expected


def test_no_far_side_eviction():
    """Existing nodes may end up with more than M neighbors"""
    store, graph, builder = make_builder(M=2)

    insert(store, builder, [0.0, 0.0], level=0)
    for vec in ([1.0, 0.0], [0.0, 1.0], [-1.0, 0.0], [0.0, -1.0]):
        node_id = insert(store, builder, vec, level=0)
        assert len(graph.get_node(node_id).get_neighbors(0)) <= 2

    assert graph.get_node(0).get_neighbors(0) == {1, 2, 3, 4}


def test_edges_respect_neighbor_levels():
    """An edge at layer L only joins nodes whose level is >= L"""
    rng = np.random.default_rng(11)
    store, graph, builder = make_builder(M=3)

    levels = rng.integers(0, 3, size=25)
    for vec, lvl in zip(rng.normal(size=(25, 2)), levels):
        insert(store, builder, vec, int(lvl))

    for node in graph.nodes.values():
        for layer, neighbors in node.neighbors.items():
            for neighbor_id in neighbors:
                assert graph.level_of(neighbor_id) >= layer
                assert node.id in graph.get_node(neighbor_id).get_neighbors(layer)


def test_insert_after_all_removed_restarts_graph():
    store, graph, builder = make_builder()
    insert(store, builder, [0.0, 0.0], level=2)
    graph.remove_node(0)

    new_id = insert(store, builder, [1.0, 1.0], level=0)

    assert graph.entry_point == new_id
    assert graph.get_max_level() == 0
    assert graph.get_node(new_id).get_neighbors(0) == set()
