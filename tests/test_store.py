"""
Tests for MemoryVectorStore.

These tests cover appending records, filtered scans and ranked
similarity search including the tie-break order.
"""

import pytest

from conftest import FixedEmbedder, MockEmbedder
from memvec import Document, MemoryVector, MemoryVectorStore, ScoreThresholdRetriever, dot_product


def first_component(query, vector):
    """Similarity that just reads the stored score out of the embedding."""
    return vector[0]


@pytest.fixture
def store(mock_embedder):
    return MemoryVectorStore(mock_embedder)


@pytest.fixture
def scored_store():
    """Store whose records score exactly [0.9, 0.95, 0.95] against any query."""
    return MemoryVectorStore(MockEmbedder(dimension=1), similarity=first_component)


async def fill_scored(store, scores):
    await store.add_vectors(
        [[s] for s in scores],
        [Document(page_content=f"doc {i}", metadata={"index": i}) for i in range(len(scores))],
    )


# --- Append ---

class TestAppend:
    """Tests for add_vectors(), add_documents() and add_texts()."""

    @pytest.mark.asyncio
    async def test_add_vectors_appends_records(self, store):
        await store.add_vectors(
            [[1.0, 0.0], [0.0, 1.0]],
            [Document("a", {"k": 1}), Document("b", {"k": 2})],
        )

        assert len(store) == 2
        assert store.memory_vectors[0] == MemoryVector("a", [1.0, 0.0], {"k": 1})
        assert store.memory_vectors[1].content == "b"

    @pytest.mark.asyncio
    async def test_add_vectors_extends_in_order(self, store):
        await store.add_vectors([[1.0]], [Document("first")])
        await store.add_vectors([[2.0], [3.0]], [Document("second"), Document("third")])

        assert [mv.content for mv in store.memory_vectors] == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_add_vectors_count_mismatch_raises(self, store):
        with pytest.raises(ValueError, match="2 vectors for 1 documents"):
            await store.add_vectors([[1.0], [2.0]], [Document("only")])

    @pytest.mark.asyncio
    async def test_add_vectors_copies_metadata(self, store):
        """Mutating the caller's dict afterwards does not change the record."""
        metadata = {"k": 1}
        await store.add_vectors([[1.0]], [Document("a", metadata)])
        metadata["k"] = 2

        assert store.memory_vectors[0].metadata == {"k": 1}

    @pytest.mark.asyncio
    async def test_add_documents_embeds_once_per_batch(self, mock_embedder, store):
        await store.add_documents([Document("hello"), Document("hi"), Document("bye")])

        assert len(store) == 3
        assert mock_embedder.calls == [["hello", "hi", "bye"]]
        assert all(len(mv.embedding) == 384 for mv in store.memory_vectors)

    @pytest.mark.asyncio
    async def test_add_texts_with_metadata_list(self, store):
        await store.add_texts(["a", "b"], [{"i": 0}, {"i": 1}])
        assert [mv.metadata for mv in store.memory_vectors] == [{"i": 0}, {"i": 1}]

    @pytest.mark.asyncio
    async def test_add_texts_with_shared_metadata(self, store):
        await store.add_texts(["a", "b"], {"source": "x"})
        assert [mv.metadata for mv in store.memory_vectors] == [{"source": "x"}, {"source": "x"}]

    @pytest.mark.asyncio
    async def test_add_texts_with_metadata_callable(self, store):
        await store.add_texts(["a", "b", "c"], lambda i: {"line": i + 1})
        assert [mv.metadata["line"] for mv in store.memory_vectors] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_add_texts_without_metadata(self, store):
        await store.add_texts(["a"])
        assert store.memory_vectors[0].metadata == {}

    @pytest.mark.asyncio
    async def test_embedder_failure_propagates(self):
        class BrokenEmbedder(MockEmbedder):
            async def embed_documents(self, texts):
                raise RuntimeError("provider down")

        store = MemoryVectorStore(BrokenEmbedder())
        with pytest.raises(RuntimeError, match="provider down"):
            await store.add_texts(["a"])
        assert len(store) == 0


# --- Scan and clear ---

class TestScan:
    """Tests for scan() and drop_index()."""

    @pytest.mark.asyncio
    async def test_scan_without_predicate_returns_all(self, store):
        await store.add_texts(["a", "b", "c"])
        assert [mv.content for mv in store.scan()] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_scan_with_predicate(self, store):
        await store.add_texts(["a", "b", "c"], lambda i: {"even": i % 2 == 0})
        result = store.scan(lambda doc: doc.metadata["even"])
        assert [mv.content for mv in result] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_predicate_sees_document_not_embedding(self, store):
        seen = []
        await store.add_texts(["a"], {"k": 1})

        store.scan(lambda doc: seen.append(doc) or True)

        assert seen == [Document(page_content="a", metadata={"k": 1})]
        assert not hasattr(seen[0], "embedding")

    @pytest.mark.asyncio
    async def test_drop_index_empties_store(self, store):
        await store.add_texts(["a", "b"])
        await store.drop_index()

        assert len(store) == 0
        assert store.scan() == []


# --- Search ---

class TestSimilaritySearch:
    """Tests for similarity_search_vector_with_score() and friends."""

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty(self, store):
        assert await store.similarity_search_vector_with_score([0.0] * 384, k=3) == []

    @pytest.mark.asyncio
    async def test_k_zero_returns_empty(self, scored_store):
        await fill_scored(scored_store, [0.9, 0.95])
        assert await scored_store.similarity_search_vector_with_score([1.0], k=0) == []

    @pytest.mark.asyncio
    async def test_results_sorted_by_descending_score(self, scored_store):
        await fill_scored(scored_store, [0.1, 0.7, 0.3, 0.9])

        results = await scored_store.similarity_search_vector_with_score([1.0], k=4)

        assert [score for _, score in results] == [0.9, 0.7, 0.3, 0.1]
        assert [doc.metadata["index"] for doc, _ in results] == [3, 1, 2, 0]

    @pytest.mark.asyncio
    async def test_k_larger_than_store_returns_all(self, scored_store):
        await fill_scored(scored_store, [0.2, 0.4])
        results = await scored_store.similarity_search_vector_with_score([1.0], k=10)
        assert len(results) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("k", [1, 2, 3, 5])
    async def test_at_most_k_results(self, scored_store, k):
        await fill_scored(scored_store, [0.5, 0.1, 0.9, 0.3])
        results = await scored_store.similarity_search_vector_with_score([1.0], k=k)

        assert len(results) == min(k, 4)
        scores = [score for _, score in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_ties_resolved_first_seen(self, scored_store):
        """Among equal top scores, the earlier record wins."""
        await fill_scored(scored_store, [0.9, 0.95, 0.95])

        results = await scored_store.similarity_search_vector_with_score([1.0], k=1)

        assert len(results) == 1
        doc, score = results[0]
        assert doc.metadata["index"] == 1
        assert score == 0.95

    @pytest.mark.asyncio
    async def test_ties_keep_insertion_order(self, scored_store):
        await fill_scored(scored_store, [0.5, 0.5, 0.8, 0.5])
        results = await scored_store.similarity_search_vector_with_score([1.0], k=4)
        assert [doc.metadata["index"] for doc, _ in results] == [2, 0, 1, 3]

    @pytest.mark.asyncio
    async def test_filter_applied_before_ranking(self, scored_store):
        await fill_scored(scored_store, [0.9, 0.8, 0.7, 0.6])

        results = await scored_store.similarity_search_vector_with_score(
            [1.0], k=2, filter=lambda doc: doc.metadata["index"] % 2 == 1
        )

        assert [doc.metadata["index"] for doc, _ in results] == [1, 3]

    @pytest.mark.asyncio
    async def test_filter_rejecting_everything(self, scored_store):
        await fill_scored(scored_store, [0.9])
        results = await scored_store.similarity_search_vector_with_score(
            [1.0], k=1, filter=lambda doc: False
        )
        assert results == []

    @pytest.mark.asyncio
    async def test_text_search_finds_exact_match(self, store):
        await store.add_texts(["hello", "hi", "bye", "what's this"], {"a": 1})

        results = await store.similarity_search("hello", k=1)

        assert results == [Document(page_content="hello", metadata={"a": 1})]

    @pytest.mark.asyncio
    async def test_text_search_with_score(self, store):
        await store.add_texts(["hello", "bye"])

        results = await store.similarity_search_with_score("bye", k=2)

        assert results[0][0].page_content == "bye"
        assert results[0][1] == pytest.approx(1.0)
        assert results[1][1] < 0.5

    @pytest.mark.asyncio
    async def test_custom_similarity_used(self):
        embedder = FixedEmbedder({
            "q": [1.0, 1.0],
            "small": [0.1, 0.1],
            "large": [10.0, 10.0],
        })
        store = MemoryVectorStore(embedder, similarity=dot_product)
        await store.add_texts(["small", "large"])

        results = await store.similarity_search_with_score("q", k=2)

        assert [doc.page_content for doc, _ in results] == ["large", "small"]
        assert results[0][1] == pytest.approx(20.0)

    @pytest.mark.asyncio
    async def test_results_do_not_alias_store(self, store):
        await store.add_texts(["a"], {"k": 1})
        (doc,) = await store.similarity_search("a", k=1)
        doc.metadata["k"] = 99
        assert store.memory_vectors[0].metadata == {"k": 1}


# --- Factories ---

class TestFactories:
    """Tests for the async constructors and as_retriever()."""

    @pytest.mark.asyncio
    async def test_from_texts(self, mock_embedder):
        store = await MemoryVectorStore.from_texts(["a", "b"], {"s": 1}, mock_embedder)
        assert len(store) == 2
        assert store.embeddings is mock_embedder

    @pytest.mark.asyncio
    async def test_from_documents_with_similarity(self, mock_embedder):
        store = await MemoryVectorStore.from_documents(
            [Document("a")], mock_embedder, similarity=dot_product
        )
        assert len(store) == 1
        assert store.similarity is dot_product

    @pytest.mark.asyncio
    async def test_from_existing_index_is_empty(self, mock_embedder):
        store = await MemoryVectorStore.from_existing_index(mock_embedder)
        assert len(store) == 0

    def test_as_retriever(self, store):
        retriever = store.as_retriever(min_similarity_score=0.5, max_k=3)
        assert isinstance(retriever, ScoreThresholdRetriever)
        assert retriever.vector_store is store
        assert retriever.min_similarity_score == 0.5
        assert retriever.max_k == 3
