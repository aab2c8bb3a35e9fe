"""
Pytest configuration and shared fixtures for memvec tests.
"""

import hashlib

import numpy as np
import pytest

from memvec import Embedder


class MockEmbedder(Embedder):
    """Mock embedder that returns deterministic embeddings for testing."""

    def __init__(self, dimension: int = 384):
        self._dimension = dimension
        self.calls = []

    async def embed_documents(self, texts):
        """Generate deterministic embeddings based on a stable text hash."""
        self.calls.append(list(texts))
        result = []
        for text in texts:
            seed = int(hashlib.sha256(text.encode("utf-8")).hexdigest()[:8], 16)
            rng = np.random.default_rng(seed)
            result.append(rng.standard_normal(self._dimension).tolist())
        return result

    @property
    def dimension(self):
        return self._dimension


class FixedEmbedder(Embedder):
    """Embedder backed by a lookup table, for hand-picked geometry."""

    def __init__(self, vectors):
        self._vectors = vectors

    async def embed_documents(self, texts):
        return [list(self._vectors[text]) for text in texts]

    @property
    def dimension(self):
        return len(next(iter(self._vectors.values())))


@pytest.fixture
def mock_embedder():
    """Mock embedder that returns deterministic embeddings."""
    return MockEmbedder(dimension=384)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires real embedding models)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests by default unless --run-integration is passed."""
    if config.getoption("--run-integration", default=False):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run integration tests (requires fastembed or sentence-transformers)"
    )
