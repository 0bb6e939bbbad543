"""Configuration for hnswlab indexes.

Usage:
    from hnswlab import HNSWIndex, VectorStore, HNSWLabConfig

    # Default config
    index = HNSWIndex(VectorStore(dimension=2))

    # Custom config
    config = HNSWLabConfig(default_M=16, default_ef_search=64)
    index = HNSWIndex(VectorStore(dimension=2), config=config)

    # From file
    config = HNSWLabConfig.from_json("my_config.json")
"""

from typing import Dict, Any, Tuple
import json
import numbers
from dataclasses import dataclass, asdict

from hnswlab.exceptions import InvalidParameter


# Inclusive bounds accepted by HNSWIndex.configure()
M_RANGE: Tuple[int, int] = (1, 100)
EF_RANGE: Tuple[int, int] = (1, 1000)

SUPPORTED_METRICS: Tuple[str, ...] = ("euclidean", "cosine")


def check_range(name: str, value: Any, bounds: Tuple[int, int]) -> int:
    """Validate that value is an integer within the inclusive bounds.

    Args:
        name: Parameter name (used in the error message)
        value: Value to check
        bounds: (low, high) inclusive range

    Returns:
        The value as an int

    Raises:
        InvalidParameter: If value is not an integer or is out of range
    """
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")

    value = int(value)
    if not low <= value <= high:
        raise InvalidParameter(f"{name} must be in [{low}, {high}], got {value}")
    return value


@dataclass
class HNSWLabConfig:
    """Configuration for hnswlab.

    HNSW defaults:
        default_M: Max neighbors selected per node per layer
        default_ef_construction: Candidate pool size while inserting
        default_ef_search: Candidate pool size while querying
        default_metric: "euclidean" or "cosine"

    Level sampling:
        max_level: Cap on the sampled node level
        level_probability: Probability of promoting a node one more level
    """

    # HNSW defaults
    default_M: int = 4
    default_ef_construction: int = 100
    default_ef_search: int = 10
    default_metric: str = "euclidean"

    # Level sampling
    max_level: int = 10
    level_probability: float = 0.5

    # Metadata
    config_name: str = "default"

    def __post_init__(self):
        """Validate configuration."""
        self.default_M = check_range("default_M", self.default_M, M_RANGE)
        self.default_ef_construction = check_range(
            "default_ef_construction", self.default_ef_construction, EF_RANGE
        )
        self.default_ef_search = check_range(
            "default_ef_search", self.default_ef_search, EF_RANGE
        )

        if self.default_metric not in SUPPORTED_METRICS:
            raise InvalidParameter(f"default_metric must be one of {list(SUPPORTED_METRICS)}")

        if isinstance(self.max_level, bool) or not isinstance(self.max_level, numbers.Integral) or self.max_level < 0:
            raise InvalidParameter("max_level must be an integer >= 0")

        if not 0.0 <= self.level_probability < 1.0:
            raise InvalidParameter("level_probability must be in [0.0, 1.0)")

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    def to_json(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'HNSWLabConfig':
        """Load configuration from dictionary."""
        return cls(**config_dict)

    @classmethod
    def from_json(cls, filepath: str) -> 'HNSWLabConfig':
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"HNSWLabConfig("
            f"{self.config_name}, "
            f"M={self.default_M}, "
            f"ef_construction={self.default_ef_construction}, "
            f"ef_search={self.default_ef_search}, "
            f"metric={self.default_metric})"
        )


# Preset configurations

def get_default_config() -> HNSWLabConfig:
    """Default configuration (small graphs, cheap to inspect)."""
    return HNSWLabConfig(config_name="default")


def get_high_recall_config() -> HNSWLabConfig:
    """Configuration trading speed for recall.

    Wider candidate pools and more neighbors per layer; self-match queries
    reliably return distance 0 with these settings.
    """
    return HNSWLabConfig(
        config_name="high_recall",
        default_M=32,
        default_ef_construction=400,
        default_ef_search=200,
    )
