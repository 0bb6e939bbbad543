"""Error types raised by hnswlab.

Every error is raised at the API boundary (store mutators, index configuration,
search entry points) and is recoverable by the caller. The concrete classes also
derive from the matching builtin (ValueError / KeyError) so callers that only
catch builtins keep working.
"""


class HNSWLabError(Exception):
    """Base class for all hnswlab errors."""


class DimensionMismatch(HNSWLabError, ValueError):
    """Vector or query length does not match the store dimension."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector dimension {actual} doesn't match store dimension {expected}"
        )


class InvalidVector(HNSWLabError, ValueError):
    """Vector contains a non-finite or non-numeric element, or has the wrong shape."""


class InvalidParameter(HNSWLabError, ValueError):
    """Configuration or search parameter outside its documented range."""


class NotFound(HNSWLabError, KeyError):
    """Unknown or tombstoned id."""

    def __init__(self, item_id) -> None:
        self.item_id = item_id
        super().__init__(f"ID {item_id!r} not found (unknown or removed)")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])
