"""Quick start guide for hnswlab.

This example shows the minimal code needed to:
1. Create an in-memory vector store
2. Build an HNSW index and search it
3. Compare against exact brute-force search
4. Inspect the search trace a visualizer would replay
"""

import logging

import numpy as np
from hnswlab import BruteForceIndex, HNSWIndex, VectorStore
from hnswlab.metrics import compare_with_brute_force, measure_search_performance


def main():
    logging.basicConfig(level=logging.INFO)

    print("="*60)
    print("hnswlab Quick Start")
    print("="*60)

    # Step 1: Create synthetic dataset
    print("\n1. Creating dataset...")
    rng = np.random.default_rng(42)

    # 500 vectors, 32 dimensions
    vectors = rng.normal(size=(500, 32))

    print(f"   Created {len(vectors)} vectors of dimension {vectors.shape[1]}")

    # Step 2: Build HNSW index (vectors go into the store through the index)
    print("\n2. Building HNSW index...")

    store = VectorStore(dimension=32)
    index = HNSWIndex(store, M=16, ef_construction=200, ef_search=50, seed=42)

    for vector in vectors:
        index.insert(vector)

    stats = index.get_stats()
    print(f"   Indexed {stats['total_vectors']} vectors")
    print(f"   Graph has {stats['max_level'] + 1} layers, entry point {stats['entry_point']}")
    print(f"   Nodes per layer: {index.get_level_distribution()}")

    # Step 3: Search
    print("\n3. Searching...")

    query = vectors[0] + rng.normal(scale=0.05, size=32)
    k = 5

    timed = measure_search_performance(index.search, query, k=k)

    print(f"   Top {k} results ({timed['execution_time_ms']:.2f} ms):")
    for rank, result in enumerate(timed["results"], 1):
        print(f"      {rank}. Vector {result['id']} (distance: {result['distance']:.4f})")

    # Step 4: Compare with exact search
    print("\n4. Comparing with brute force...")

    brute_force = BruteForceIndex(store)
    queries = rng.normal(size=(20, 32))
    recall = compare_with_brute_force(index, brute_force, queries, k=10)

    print(f"   Mean recall@10 over {len(queries)} queries: {recall:.2%}")

    # Step 5: Inspect the trace of the last search
    print("\n5. Search trace...")

    index.search(query, k=k)
    for layer_trace in index.get_search_trace():
        print(
            f"   Layer {layer_trace.level}: entry {layer_trace.entry_point}, "
            f"{len(layer_trace.steps)} steps, {len(layer_trace.final_results)} visited"
        )

    # Step 6: Tune and remove
    print("\n6. Tuning and removal...")

    index.configure(ef_search=200)
    index.remove(stats["entry_point"])
    print(f"   New entry point after removal: {index.get_stats()['entry_point']}")

    print("\n" + "="*60)
    print("Quick start complete!")
    print("="*60)


if __name__ == "__main__":
    main()
