"""
Semantic Cache - LLM response caching with semantic similarity matching.

Each cache key (typically a model identifier plus its settings) gets its
own isolated in-memory vector store. A lookup embeds the prompt, asks a
score-threshold retriever for the single closest prior prompt in that
namespace and, if it is close enough, returns the generations stored
alongside it.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .config import CacheConfig
from .document import Document
from .embedders import Embedder, create_embedder
from .exceptions import CacheDecodeError
from .retrievers import ScoreThresholdRetriever
from .similarity import SimilarityFn, get_similarity
from .store import MemoryVectorStore

logger = logging.getLogger(__name__)

NAMESPACE_PREFIX = "cache:"


@dataclass
class Generation:
    """A single cached LLM output."""
    text: str
    generation_info: Optional[Dict[str, Any]] = None


GenerationLike = Union[Generation, Mapping[str, Any]]


@dataclass
class CacheStats:
    """Statistics for cache performance monitoring."""
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    @property
    def total_queries(self) -> int:
        return self.hits + self.misses

    def __repr__(self) -> str:
        return (f"CacheStats(hits={self.hits}, misses={self.misses}, "
                f"hit_rate={self.hit_rate:.1%})")


def namespace_id(llm_key: str) -> str:
    """Deterministic namespace name for a cache key."""
    return NAMESPACE_PREFIX + hashlib.md5(llm_key.encode("utf-8")).hexdigest()


def dump_generations_to_json(generations: Sequence[GenerationLike]) -> str:
    """
    Serialize generations for storage in record metadata.

    Only the text of each generation is kept; generation_info and any
    other fields are dropped.
    """
    return json.dumps([{"text": _text_of(g)} for g in generations])


def load_generations_from_json(generations_json: Any) -> List[Generation]:
    """
    Load generations from json.

    Args:
        generations_json: A JSON array of objects, each with a string "text".

    Raises:
        CacheDecodeError: If the payload is not valid JSON, is not an array,
            or any element lacks a string "text". One bad element fails
            the whole payload.
    """
    try:
        results = json.loads(generations_json)
    except (TypeError, ValueError) as e:
        raise CacheDecodeError(generations_json) from e

    if not isinstance(results, list):
        raise CacheDecodeError(generations_json)

    generations = []
    for item in results:
        if not isinstance(item, dict) or not isinstance(item.get("text"), str):
            raise CacheDecodeError(generations_json)
        info = item.get("generation_info")
        generations.append(
            Generation(text=item["text"], generation_info=info if isinstance(info, dict) else None)
        )
    return generations


def _text_of(generation: GenerationLike) -> str:
    if isinstance(generation, Mapping):
        return generation["text"]
    return generation.text


class SemanticCache:
    """
    Semantic cache for LLM generations, partitioned by cache key.

    The cache holds a store factory rather than being a store itself:
    every namespace gets a fresh MemoryVectorStore from the factory.

    Example:
        cache = SemanticCache(create_embedder("fastembed"), score_threshold=0.9)

        await cache.update("Who killed John F. Kennedy?", "gpt-4o",
                           [Generation("Lee Harvey Oswald")])
        await cache.lookup("Who was JFK's murderer?", "gpt-4o")
        # -> [Generation(text='Lee Harvey Oswald', generation_info=None)]

        await cache.clear("gpt-4o")
    """

    def __init__(
        self,
        embeddings: Embedder,
        score_threshold: float = 0.2,
        similarity: Optional[SimilarityFn] = None,
        store_factory: Optional[Callable[[], MemoryVectorStore]] = None,
        max_k: int = 1,
    ):
        """
        Initialize the semantic cache.

        Args:
            embeddings: Provider used to embed prompts.
            score_threshold: Minimum similarity for a cache hit.
                Higher = stricter matching, fewer false hits.
            similarity: Scoring function for the default store factory.
            store_factory: Zero-argument callable returning a new empty
                store. Overrides `similarity` when given.
            max_k: Number of nearest prior prompts considered per lookup.
        """
        self.embeddings = embeddings
        self.score_threshold = score_threshold
        self.max_k = max_k
        self.stats = CacheStats()
        self._store_factory = store_factory or (
            lambda: MemoryVectorStore(embeddings, similarity=similarity)
        )
        self._cache_dict: Dict[str, MemoryVectorStore] = {}

    @classmethod
    def from_config(
        cls,
        config: Optional[CacheConfig] = None,
        embedder: Optional[Embedder] = None,
    ) -> "SemanticCache":
        """
        Build a cache from a CacheConfig (read from the environment if omitted).

        Args:
            config: Cache settings.
            embedder: Embedder to use instead of the one named in config.
        """
        config = config or CacheConfig.from_env()
        if embedder is None:
            kwargs = {"model_name": config.embedding_model} if config.embedding_model else {}
            embedder = create_embedder(config.embedder, **kwargs)

        logger.info(
            f"SemanticCache using {type(embedder).__name__} "
            f"(threshold={config.score_threshold}, similarity={config.similarity})"
        )
        return cls(
            embedder,
            score_threshold=config.score_threshold,
            similarity=get_similarity(config.similarity),
            max_k=config.max_k,
        )

    @staticmethod
    def namespace_id(llm_key: str) -> str:
        return namespace_id(llm_key)

    @property
    def namespaces(self) -> List[str]:
        """Namespace ids that currently have a store."""
        return list(self._cache_dict)

    def has_namespace(self, llm_key: str) -> bool:
        return namespace_id(llm_key) in self._cache_dict

    def _get_store(self, llm_key: str) -> MemoryVectorStore:
        index_name = namespace_id(llm_key)
        store = self._cache_dict.get(index_name)
        if store is None:
            store = self._store_factory()
            self._cache_dict[index_name] = store
            logger.debug(f"Created namespace {index_name}")
        return store

    def _get_llm_cache(self, llm_key: str) -> ScoreThresholdRetriever:
        return ScoreThresholdRetriever.from_vector_store(
            self._get_store(llm_key),
            min_similarity_score=self.score_threshold,
            max_k=self.max_k,
        )

    async def from_existing_index(self, llm_key: str) -> None:
        """Make sure a namespace exists, creating an empty store if needed."""
        self._get_store(llm_key)

    async def lookup(self, prompt: str, llm_key: str) -> Optional[List[Generation]]:
        """
        Look up generations cached for a semantically similar prompt.

        Args:
            prompt: The prompt to match.
            llm_key: Cache key selecting the namespace.

        Returns:
            The cached generations, or None on a miss. A match whose
            payload decodes to an empty list is also reported as None.

        Raises:
            CacheDecodeError: If a matched record holds a malformed payload.
        """
        llm_cache = self._get_llm_cache(llm_key)
        results = await llm_cache.get_relevant_documents(prompt)

        generations: List[Generation] = []
        for document in results:
            generations.extend(load_generations_from_json(document.metadata.get("return_val")))

        if generations:
            self.stats.hits += 1
            logger.debug(f"Cache hit in {namespace_id(llm_key)} ({len(generations)} generations)")
            return generations

        self.stats.misses += 1
        logger.debug(f"Cache miss in {namespace_id(llm_key)}")
        return None

    async def update(self, prompt: str, llm_key: str, return_val: Sequence[GenerationLike]) -> None:
        """
        Store generations for a prompt.

        Args:
            prompt: The prompt that produced the generations.
            llm_key: Cache key selecting the namespace.
            return_val: Generations (or mappings with a "text" key). Only
                their text is kept.
        """
        llm_cache = self._get_llm_cache(llm_key)

        metadata = {
            "llm_string": llm_key,
            "prompt": prompt,
            "return_val": dump_generations_to_json(return_val),
        }
        await llm_cache.add_documents([Document(page_content=prompt, metadata=metadata)])

    async def clear(self, llm_key: str) -> None:
        """Drop a namespace and everything cached in it."""
        index_name = namespace_id(llm_key)

        if index_name in self._cache_dict:
            await self._cache_dict[index_name].drop_index()
            del self._cache_dict[index_name]
            logger.debug(f"Cleared namespace {index_name}")

    def cached(self, llm_key: str) -> Callable:
        """
        Decorator for caching an async prompt -> generations function.

        Example:
            @cache.cached("gpt-4o")
            async def ask(prompt: str) -> List[Generation]:
                ...
        """
        def decorator(func: Callable) -> Callable:
            @wraps(func)
            async def wrapper(prompt: str, *args, **kwargs):
                hit = await self.lookup(prompt, llm_key)
                if hit is not None:
                    return hit

                result = await func(prompt, *args, **kwargs)
                await self.update(prompt, llm_key, result)
                return result
            return wrapper
        return decorator

    def __repr__(self) -> str:
        return (f"SemanticCache(namespaces={len(self._cache_dict)}, "
                f"threshold={self.score_threshold}, stats={self.stats})")
