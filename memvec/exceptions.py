"""
Exception types raised by memvec.
"""


class MemvecError(Exception):
    """Base class for memvec errors."""
    pass


class CacheDecodeError(MemvecError, ValueError):
    """Raised when a cached payload cannot be decoded into generations."""

    def __init__(self, payload):
        self.payload = payload
        super().__init__(
            f"Could not decode json to list of generations: {payload}"
        )


class DimensionMismatchError(MemvecError, ValueError):
    """Raised when two vectors of different lengths are compared."""

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(
            f"Vector dimensions do not match: {left} != {right}"
        )
