"""
In-memory vector store with exact (linear scan) similarity search.

Records are kept in insertion order. Every search scores every record
that passes the optional filter, so cost is O(n) per query; there is no
index structure and nothing is persisted.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from .document import Document, MemoryVector
from .embedders import Embedder
from .retrievers import ScoreThresholdRetriever
from .similarity import SimilarityFn, cosine

logger = logging.getLogger(__name__)

DocumentFilter = Callable[[Document], bool]
Metadatas = Union[List[Dict[str, Any]], Dict[str, Any], Callable[[int], Dict[str, Any]], None]


class MemoryVectorStore:
    """
    Vector store that keeps all embeddings in a Python list.

    Example:
        store = await MemoryVectorStore.from_texts(
            ["hello", "hi", "bye"], {"source": "greetings"}, embedder
        )
        for doc, score in await store.similarity_search_with_score("hey", k=2):
            print(f"{doc.page_content} (score: {score:.3f})")
    """

    def __init__(self, embeddings: Embedder, similarity: Optional[SimilarityFn] = None):
        """
        Args:
            embeddings: Provider used to embed documents and queries.
            similarity: Scoring function, fixed for the lifetime of the
                store. Defaults to cosine similarity.
        """
        self.embeddings = embeddings
        self.similarity = similarity or cosine
        self.memory_vectors: List[MemoryVector] = []

    def __len__(self) -> int:
        return len(self.memory_vectors)

    def __repr__(self) -> str:
        return (f"MemoryVectorStore(records={len(self)}, "
                f"similarity={getattr(self.similarity, '__name__', self.similarity)})")

    async def add_documents(self, documents: Sequence[Document]) -> None:
        """Embed documents in one batch and append them to the store."""
        texts = [doc.page_content for doc in documents]
        vectors = await self.embeddings.embed_documents(texts)
        await self.add_vectors(vectors, documents)

    async def add_vectors(
        self,
        vectors: Sequence[Sequence[float]],
        documents: Sequence[Document],
    ) -> None:
        """
        Append precomputed embeddings paired with their documents.

        Args:
            vectors: One embedding per document.
            documents: Documents supplying content and metadata.

        Raises:
            ValueError: If the number of vectors and documents differ.
        """
        if len(vectors) != len(documents):
            raise ValueError(
                f"Got {len(vectors)} vectors for {len(documents)} documents"
            )

        self.memory_vectors.extend(
            MemoryVector(
                content=doc.page_content,
                embedding=list(vector),
                metadata=dict(doc.metadata),
            )
            for vector, doc in zip(vectors, documents)
        )
        logger.debug(f"Appended {len(documents)} records (total: {len(self)})")

    async def add_texts(self, texts: Sequence[str], metadatas: Metadatas = None) -> None:
        """
        Wrap texts in documents, embed them and append them.

        Args:
            texts: Text fragments to store.
            metadatas: A list with one dict per text, a single dict shared
                by every text, a callable mapping the text index to a dict,
                or None.
        """
        documents = [
            Document(page_content=text, metadata=_metadata_for(metadatas, i))
            for i, text in enumerate(texts)
        ]
        await self.add_documents(documents)

    def scan(self, predicate: Optional[DocumentFilter] = None) -> List[MemoryVector]:
        """Return every record whose document view satisfies predicate."""
        if predicate is None:
            return list(self.memory_vectors)
        return [mv for mv in self.memory_vectors if predicate(mv.to_document())]

    async def similarity_search_vector_with_score(
        self,
        query: Sequence[float],
        k: int,
        filter: Optional[DocumentFilter] = None,
    ) -> List[Tuple[Document, float]]:
        """
        Rank stored records against a query embedding.

        Args:
            query: Query embedding.
            k: Maximum number of results.
            filter: Optional predicate over each record's document view.

        Returns:
            Up to k (document, score) pairs, best first. Records with
            equal scores keep their insertion order.
        """
        if k <= 0:
            return []

        candidates = self.scan(filter)
        scored = [
            (self.similarity(query, mv.embedding), index)
            for index, mv in enumerate(candidates)
        ]
        # sorted() is stable with reverse=True, so ties stay first-seen first
        ranked = sorted(scored, key=lambda item: item[0], reverse=True)[:k]
        logger.debug(f"Scored {len(candidates)} of {len(self)} records, returning {len(ranked)}")

        return [(candidates[index].to_document(), score) for score, index in ranked]

    async def similarity_search_with_score(
        self,
        query: str,
        k: int = 4,
        filter: Optional[DocumentFilter] = None,
    ) -> List[Tuple[Document, float]]:
        """Embed a text query and rank stored records against it."""
        query_vector = await self.embeddings.embed_query(query)
        return await self.similarity_search_vector_with_score(query_vector, k, filter)

    async def similarity_search(
        self,
        query: str,
        k: int = 4,
        filter: Optional[DocumentFilter] = None,
    ) -> List[Document]:
        """Like similarity_search_with_score, without the scores."""
        results = await self.similarity_search_with_score(query, k, filter)
        return [doc for doc, _ in results]

    def as_retriever(
        self,
        min_similarity_score: float = 0.2,
        max_k: int = 1,
    ) -> ScoreThresholdRetriever:
        """Wrap this store in a score-threshold retriever."""
        return ScoreThresholdRetriever(
            self,
            min_similarity_score=min_similarity_score,
            max_k=max_k,
        )

    async def drop_index(self) -> None:
        """Remove every record. Irreversible."""
        self.memory_vectors = []

    @classmethod
    async def from_texts(
        cls,
        texts: Sequence[str],
        metadatas: Metadatas,
        embeddings: Embedder,
        similarity: Optional[SimilarityFn] = None,
    ) -> "MemoryVectorStore":
        """Create a store pre-filled with texts."""
        instance = cls(embeddings, similarity=similarity)
        await instance.add_texts(texts, metadatas)
        return instance

    @classmethod
    async def from_documents(
        cls,
        documents: Sequence[Document],
        embeddings: Embedder,
        similarity: Optional[SimilarityFn] = None,
    ) -> "MemoryVectorStore":
        """Create a store pre-filled with documents."""
        instance = cls(embeddings, similarity=similarity)
        await instance.add_documents(documents)
        return instance

    @classmethod
    async def from_existing_index(
        cls,
        embeddings: Embedder,
        similarity: Optional[SimilarityFn] = None,
    ) -> "MemoryVectorStore":
        """Create an empty store. Nothing is loaded; there is no backing index."""
        return cls(embeddings, similarity=similarity)


def _metadata_for(metadatas: Metadatas, index: int) -> Dict[str, Any]:
    if metadatas is None:
        return {}
    if callable(metadatas):
        return dict(metadatas(index))
    if isinstance(metadatas, dict):
        return dict(metadatas)
    return dict(metadatas[index])
