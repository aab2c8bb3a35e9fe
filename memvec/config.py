"""
Configuration for the semantic cache, read from environment variables.

Variables:
    MEMVEC_SCORE_THRESHOLD  Minimum similarity for a cache hit (default: 0.2)
    MEMVEC_MAX_K            Maximum hits considered per lookup (default: 1)
    MEMVEC_SIMILARITY       'cosine', 'dot' or 'euclidean' (default: cosine)
    MEMVEC_EMBEDDER         'fastembed', 'sentence-transformers', 'openai'
                            (default: auto-detect)
    MEMVEC_EMBEDDING_MODEL  Model name passed to the embedder
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .similarity import cosine, get_similarity

DEFAULT_SCORE_THRESHOLD = 0.2
DEFAULT_MAX_K = 1
DEFAULT_SIMILARITY = "cosine"


@dataclass
class CacheConfig:
    """Settings for a SemanticCache."""
    score_threshold: float = DEFAULT_SCORE_THRESHOLD
    max_k: int = DEFAULT_MAX_K
    similarity: str = DEFAULT_SIMILARITY
    embedder: Optional[str] = None
    embedding_model: Optional[str] = None

    def __post_init__(self):
        # only cosine scores are bounded
        if get_similarity(self.similarity) is cosine and not -1.0 <= self.score_threshold <= 1.0:
            raise ValueError(
                f"score_threshold must be between -1.0 and 1.0 for cosine, got {self.score_threshold}"
            )
        if self.max_k < 1:
            raise ValueError(f"max_k must be at least 1, got {self.max_k}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CacheConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Raises:
            ValueError: If a numeric variable cannot be parsed or is out of range.
        """
        env = os.environ if environ is None else environ

        return cls(
            score_threshold=_parse(env, "MEMVEC_SCORE_THRESHOLD", float, DEFAULT_SCORE_THRESHOLD),
            max_k=_parse(env, "MEMVEC_MAX_K", int, DEFAULT_MAX_K),
            similarity=env.get("MEMVEC_SIMILARITY") or DEFAULT_SIMILARITY,
            embedder=env.get("MEMVEC_EMBEDDER") or None,
            embedding_model=env.get("MEMVEC_EMBEDDING_MODEL") or None,
        )


def _parse(env: Mapping[str, str], name: str, convert, default):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return convert(raw)
    except ValueError:
        raise ValueError(f"{name} must be a {convert.__name__}, got '{raw}'") from None
