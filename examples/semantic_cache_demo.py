#!/usr/bin/env python3
"""
Demo: Semantic Cache in action.

Shows cache hits for semantically similar prompts, namespace isolation
and clearing a namespace.

Usage:
    python examples/semantic_cache_demo.py
"""

import asyncio
import time

from memvec import Generation, SemanticCache, create_embedder

LLM_KEY = "demo-llm:temperature=0"


async def simulate_llm_call(prompt: str):
    """Simulate an expensive LLM call (1 second delay)."""
    await asyncio.sleep(1.0)
    return [Generation(f"This is the answer to: {prompt}")]


async def main():
    print("Loading embedding model (first time may take a moment)...")
    cache = SemanticCache(create_embedder(), score_threshold=0.85)
    print(f"Cache initialized: {cache}\n")

    @cache.cached(LLM_KEY)
    async def ask(prompt: str):
        return await simulate_llm_call(prompt)

    print("=" * 60)
    print("SEMANTIC CACHE DEMO")
    print("=" * 60)

    queries = [
        ("What is the capital of France?", "first call"),
        ("What is the capital of France?", "exact repeat"),
        ("Tell me the capital of France", "semantic match"),
        ("What is Python?", "different topic"),
        ("Tell me about Python programming", "semantic match"),
    ]
    for i, (prompt, label) in enumerate(queries, 1):
        print(f"\n[Query {i}] '{prompt}' ({label})")
        start = time.perf_counter()
        result = await ask(prompt)
        elapsed = (time.perf_counter() - start) * 1000
        print(f"  Result: {result[0].text}")
        print(f"  Time: {elapsed:.0f}ms")

    print("\n" + "=" * 60)
    print("NAMESPACES")
    print("=" * 60)
    other = await cache.lookup("What is the capital of France?", "another-llm")
    print(f"  Same prompt, other key: {other}")

    await cache.clear(LLM_KEY)
    cleared = await cache.lookup("What is the capital of France?", LLM_KEY)
    print(f"  After clear: {cleared}")

    print(f"\n  {cache.stats}")


if __name__ == "__main__":
    asyncio.run(main())
