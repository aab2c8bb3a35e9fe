"""
Similarity functions for comparing embedding vectors.

Every function takes two equal-length sequences of floats and returns a
score where higher means more similar. A store picks one function at
construction time and keeps it for its whole lifetime.

Example:
    store = MemoryVectorStore(embedder)                        # cosine
    store = MemoryVectorStore(embedder, similarity=dot_product)
    store = MemoryVectorStore(embedder, similarity=get_similarity("euclidean"))
"""

from typing import Callable, Dict, Sequence

import numpy as np

from .exceptions import DimensionMismatchError

SimilarityFn = Callable[[Sequence[float], Sequence[float]], float]


def _as_arrays(a: Sequence[float], b: Sequence[float]):
    x = np.asarray(a, dtype=np.float64)
    y = np.asarray(b, dtype=np.float64)
    if x.shape != y.shape:
        raise DimensionMismatchError(x.size, y.size)
    return x, y


def cosine(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors, in [-1.0, 1.0].

    A zero vector has no direction, so it scores 0.0 against anything.
    """
    x, y = _as_arrays(a, b)
    norm = np.linalg.norm(x) * np.linalg.norm(y)
    if norm == 0:
        return 0.0
    return float(np.dot(x, y) / norm)


def dot_product(a: Sequence[float], b: Sequence[float]) -> float:
    """Raw inner product. Equals cosine for unit-normalized embeddings."""
    x, y = _as_arrays(a, b)
    return float(np.dot(x, y))


def euclidean(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance mapped to a (0, 1] score: 1 / (1 + distance)."""
    x, y = _as_arrays(a, b)
    return float(1.0 / (1.0 + np.linalg.norm(x - y)))


SIMILARITY_FUNCTIONS: Dict[str, SimilarityFn] = {
    "cosine": cosine,
    "dot": dot_product,
    "euclidean": euclidean,
}


def get_similarity(name: str) -> SimilarityFn:
    """
    Look up a similarity function by name.

    Args:
        name: One of 'cosine', 'dot', 'euclidean' (case-insensitive;
            'dot_product' and 'l2' are accepted aliases).

    Raises:
        ValueError: If the name is unknown.
    """
    name_lower = name.lower().replace("-", "_")
    aliases = {"dot_product": "dot", "inner": "dot", "l2": "euclidean"}
    name_lower = aliases.get(name_lower, name_lower)

    if name_lower not in SIMILARITY_FUNCTIONS:
        raise ValueError(
            f"Unknown similarity: '{name}'. "
            f"Supported: {', '.join(repr(n) for n in SIMILARITY_FUNCTIONS)}"
        )
    return SIMILARITY_FUNCTIONS[name_lower]
