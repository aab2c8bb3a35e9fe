#!/usr/bin/env python3
"""
Basic memvec usage: build an in-memory store and search it.

Run with: python examples/basic_search.py
"""

import asyncio

from memvec import MemoryVectorStore, create_embedder, get_similarity


async def main():
    embedder = create_embedder()

    store = await MemoryVectorStore.from_texts(
        [
            "Hello, how are you?",
            "I'm working on a project",
            "The deploy pipeline runs on Fridays",
            "Goodbye, see you tomorrow",
        ],
        [{"user": "alice"}, {"user": "bob"}, {"user": "bob"}, {"user": "alice"}],
        embedder,
    )
    print(f"Store: {store}")

    # Plain top-k search
    print("\nTop 2 for 'greeting':")
    for doc, score in await store.similarity_search_with_score("greeting", k=2):
        print(f"  {score:.3f}  {doc.page_content}")

    # Filter on metadata; the filter never sees embeddings
    print("\nBob's messages about work:")
    results = await store.similarity_search_with_score(
        "work", k=5, filter=lambda doc: doc.metadata["user"] == "bob"
    )
    for doc, score in results:
        print(f"  {score:.3f}  {doc.page_content}")

    # Only accept confident matches
    retriever = store.as_retriever(min_similarity_score=0.5, max_k=3)
    print(f"\nConfident matches for 'see you later': "
          f"{[d.page_content for d in await retriever.get_relevant_documents('see you later')]}")

    # A different scoring function fixed at construction time
    dot_store = await MemoryVectorStore.from_texts(
        ["alpha", "beta"], {}, embedder, similarity=get_similarity("dot")
    )
    print(f"\nDot-product store: {dot_store}")


if __name__ == "__main__":
    asyncio.run(main())
