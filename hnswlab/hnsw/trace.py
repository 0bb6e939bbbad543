"""Search trace records.

HNSWIndex.search() records what the layer search did at every step so an
external visualizer can replay it. A trace is a list of LayerTrace records,
one per layer traversed, top layer first and layer 0 last.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Tuple

# (node_id, distance) pairs
Scored = Tuple[int, float]


@dataclass
class SearchStep:
    """One expansion step of the layer search.

    Attributes:
        step: 1-based step number within the layer
        current_node: Candidate popped for expansion
        current_distance: Its distance to the query
        candidates_snapshot: Candidate IDs remaining after the pop
        visited_snapshot: IDs visited before expansion
        checked_neighbors: Neighbors first seen in this step, with distances
    """

    step: int
    current_node: int
    current_distance: float
    candidates_snapshot: List[int]
    visited_snapshot: List[int]
    checked_neighbors: List[Scored] = field(default_factory=list)


@dataclass
class LayerTrace:
    """Layer search record.

    Attributes:
        level: Layer searched
        entry_point: Node the search started from
        ef: Candidate pool bound used
        steps: Ordered expansion steps
        final_results: Every visited node sorted by (distance, id)
    """

    level: int
    entry_point: int
    ef: int
    steps: List[SearchStep] = field(default_factory=list)
    final_results: List[Scored] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict form for serialization; scored pairs become {'id', 'distance'} dicts."""
        as_dict = asdict(self)
        for step in as_dict["steps"]:
            step["checked_neighbors"] = _scored_dicts(step["checked_neighbors"])
        as_dict["final_results"] = _scored_dicts(as_dict["final_results"])
        return as_dict


def _scored_dicts(pairs: List[Scored]) -> List[Dict[str, Any]]:
    return [{"id": node_id, "distance": distance} for node_id, distance in pairs]
