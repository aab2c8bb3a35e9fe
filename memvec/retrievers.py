"""
Retriever that only returns search hits above a similarity threshold.
"""

import logging
from typing import TYPE_CHECKING, List, Sequence, Tuple

from .document import Document

if TYPE_CHECKING:
    from .store import MemoryVectorStore

logger = logging.getLogger(__name__)


class ScoreThresholdRetriever:
    """
    Gatekeeper over a vector store.

    Searches with k = max_k and drops every hit scoring strictly below
    min_similarity_score. An empty list means nothing was close enough.
    """

    def __init__(
        self,
        vector_store: "MemoryVectorStore",
        min_similarity_score: float = 0.2,
        max_k: int = 1,
    ):
        self.vector_store = vector_store
        self.min_similarity_score = min_similarity_score
        self.max_k = max_k

    @classmethod
    def from_vector_store(
        cls,
        vector_store: "MemoryVectorStore",
        min_similarity_score: float = 0.2,
        max_k: int = 1,
    ) -> "ScoreThresholdRetriever":
        return cls(vector_store, min_similarity_score=min_similarity_score, max_k=max_k)

    async def get_relevant_documents_with_score(self, query: str) -> List[Tuple[Document, float]]:
        """Return (document, score) pairs that clear the threshold, best first."""
        results = await self.vector_store.similarity_search_with_score(query, self.max_k)
        kept = [(doc, score) for doc, score in results if score >= self.min_similarity_score]

        if len(kept) < len(results):
            logger.debug(
                f"Dropped {len(results) - len(kept)} hits below "
                f"threshold {self.min_similarity_score}"
            )
        return kept

    async def get_relevant_documents(self, query: str) -> List[Document]:
        """Return documents that clear the threshold, best first."""
        return [doc for doc, _ in await self.get_relevant_documents_with_score(query)]

    async def add_documents(self, documents: Sequence[Document]) -> None:
        """Add documents to the underlying store."""
        await self.vector_store.add_documents(documents)

    def __repr__(self) -> str:
        return (f"ScoreThresholdRetriever(min_similarity_score={self.min_similarity_score}, "
                f"max_k={self.max_k}, store={self.vector_store!r})")
