"""
memvec - In-memory vector store with a semantic cache on top.

Exact similarity search over embedded text fragments, and an LLM
response cache that answers prompts "close enough" to earlier ones.

Install options:
    pip install memvec                # Core (bring your own embedder)
    pip install memvec[fastembed]     # Lightweight local embeddings
    pip install memvec[gpu]           # With sentence-transformers
    pip install memvec[openai]        # With OpenAI embeddings
    pip install memvec[all]           # All backends
"""

from .cache import (
    CacheStats,
    Generation,
    SemanticCache,
    dump_generations_to_json,
    load_generations_from_json,
    namespace_id,
)
from .config import CacheConfig
from .document import Document, MemoryVector
from .embedders import (
    Embedder,
    ThreadedEmbedder,
    FastEmbedEmbedder,
    SentenceTransformerEmbedder,
    CallableEmbedder,
    OpenAIEmbedder,
    create_embedder,
    get_default_embedder,
)
from .exceptions import CacheDecodeError, DimensionMismatchError, MemvecError
from .retrievers import ScoreThresholdRetriever
from .similarity import cosine, dot_product, euclidean, get_similarity
from .store import MemoryVectorStore

__all__ = [
    # Core
    "MemoryVectorStore",
    "ScoreThresholdRetriever",
    "SemanticCache",
    "CacheStats",
    "CacheConfig",
    "Document",
    "MemoryVector",
    "Generation",
    "namespace_id",
    "dump_generations_to_json",
    "load_generations_from_json",
    # Similarity
    "cosine",
    "dot_product",
    "euclidean",
    "get_similarity",
    # Embedders
    "Embedder",
    "ThreadedEmbedder",
    "FastEmbedEmbedder",
    "SentenceTransformerEmbedder",
    "CallableEmbedder",
    "OpenAIEmbedder",
    "create_embedder",
    "get_default_embedder",
    # Errors
    "MemvecError",
    "CacheDecodeError",
    "DimensionMismatchError",
]
__version__ = "0.1.0"
