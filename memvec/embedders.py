"""
Embedding providers for memvec.

memvec never computes embeddings itself: stores and caches await an
Embedder whenever text has to become vectors. Local models block, so
they run in a worker thread; remote and custom providers may be async.

Example:
    store = MemoryVectorStore(create_embedder())                 # auto-detect
    cache = SemanticCache(create_embedder("openai"))
    store = MemoryVectorStore(create_embedder(my_func, dimension=384))
"""

import asyncio
import importlib
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

EmbedFunc = Callable[[List[str]], Union[Sequence[Sequence[float]], Awaitable[Sequence[Sequence[float]]]]]


def _rows_to_lists(rows) -> List[List[float]]:
    return [[float(x) for x in row] for row in rows]


def _require(module: str, package: str):
    """Import an optional backend module or explain how to install it."""
    try:
        return importlib.import_module(module)
    except ImportError:
        raise ImportError(
            f"The '{package}' backend is not installed. Install with: pip install {package}"
        ) from None


class Embedder(ABC):
    """Async contract every embedding provider implements."""

    @abstractmethod
    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """Return one vector per text, in input order."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of the vectors this provider produces."""

    async def embed_query(self, text: str) -> List[float]:
        return (await self.embed_documents([text]))[0]


class ThreadedEmbedder(Embedder):
    """
    Runs a blocking batch encoder off the event loop.

    Subclasses load a model and hand its batch function to __init__.
    """

    def __init__(self, encode: Callable[[List[str]], Sequence], dimension: Optional[int] = None):
        self._encode = encode
        self._dimension = dimension

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        rows = await asyncio.to_thread(self._encode, list(texts))
        return _rows_to_lists(rows)

    @property
    def dimension(self) -> int:
        if self._dimension is None:
            # unknown until the model has produced one vector
            self._dimension = len(self._encode(["dimension probe"])[0])
        return self._dimension


class FastEmbedEmbedder(ThreadedEmbedder):
    """ONNX models through fastembed. The default backend."""

    DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"

    def __init__(self, model_name: Optional[str] = None):
        fastembed = _require("fastembed", "fastembed")
        model_name = model_name or self.DEFAULT_MODEL
        model = fastembed.TextEmbedding(model_name)
        # fastembed yields lazily, materialize inside the worker thread
        super().__init__(lambda texts: list(model.embed(texts)))
        logger.info(f"Loaded fastembed model {model_name}")


class SentenceTransformerEmbedder(ThreadedEmbedder):
    """PyTorch models through sentence-transformers, with optional GPU device."""

    DEFAULT_MODEL = "all-MiniLM-L6-v2"

    def __init__(self, model_name: Optional[str] = None, device: Optional[str] = None):
        st = _require("sentence_transformers", "sentence-transformers")
        model_name = model_name or self.DEFAULT_MODEL
        model = st.SentenceTransformer(model_name, device=device)
        super().__init__(
            lambda texts: model.encode(texts, convert_to_numpy=True),
            dimension=model.get_sentence_embedding_dimension(),
        )
        logger.info(f"Loaded sentence-transformers model {model_name} on {model.device}")


class CallableEmbedder(Embedder):
    """Adapter for a plain or coroutine function mapping texts to vectors."""

    def __init__(self, embed_func: EmbedFunc, dimension: int):
        self._embed_func = embed_func
        self._dimension = dimension

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        result = self._embed_func(list(texts))
        if inspect.isawaitable(result):
            result = await result
        return _rows_to_lists(result)

    @property
    def dimension(self) -> int:
        return self._dimension


class OpenAIEmbedder(Embedder):
    """Remote embeddings via the async OpenAI client (reads OPENAI_API_KEY)."""

    DEFAULT_MODEL = "text-embedding-3-small"

    def __init__(self, model_name: Optional[str] = None, api_key: Optional[str] = None):
        openai = _require("openai", "openai")
        self._model = model_name or self.DEFAULT_MODEL
        self._client = openai.AsyncOpenAI(api_key=api_key) if api_key else openai.AsyncOpenAI()
        self._dimension = 3072 if self._model.endswith("-large") else 1536

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        response = await self._client.embeddings.create(model=self._model, input=list(texts))
        return [item.embedding for item in response.data]

    @property
    def dimension(self) -> int:
        return self._dimension


# --- Factories ---

# Backend name -> importable module, used by the CLI to report availability
BACKEND_MODULES = {
    "fastembed": "fastembed",
    "sentence-transformers": "sentence_transformers",
    "openai": "openai",
}

_ALIASES = {
    "fastembed": "fastembed",
    "fast": "fastembed",
    "sentencetransformers": "sentence-transformers",
    "st": "sentence-transformers",
    "sbert": "sentence-transformers",
    "openai": "openai",
    "oai": "openai",
}

# Local backends tried, in order, when no embedder is named
DEFAULT_ORDER = ("fastembed", "sentence-transformers")


def get_embedder_by_name(name: str, **kwargs) -> Embedder:
    """
    Build a backend by name or alias; kwargs go to its constructor.

    Raises:
        ValueError: Unknown name.
        ImportError: The backend's library is missing.
    """
    backend = _ALIASES.get(name.lower().replace("-", "").replace("_", ""))

    if backend == "fastembed":
        return FastEmbedEmbedder(**kwargs)
    if backend == "sentence-transformers":
        return SentenceTransformerEmbedder(**kwargs)
    if backend == "openai":
        return OpenAIEmbedder(**kwargs)
    raise ValueError(
        f"Unknown embedder '{name}', expected one of: {', '.join(BACKEND_MODULES)}"
    )


def get_default_embedder() -> Embedder:
    """First local backend that imports, in DEFAULT_ORDER."""
    for backend in DEFAULT_ORDER:
        try:
            return get_embedder_by_name(backend)
        except ImportError:
            logger.debug(f"{backend} not available")

    raise ImportError(
        "No embedding provider found; install memvec[fastembed] or memvec[gpu]"
    )


def create_embedder(
    embedder: Union[Embedder, Callable, str, None] = None,
    dimension: Optional[int] = None,
    **kwargs,
) -> Embedder:
    """
    Normalize the ways callers can specify an embedder.

    Args:
        embedder: None (auto-detect a local backend), a backend name,
            an Embedder instance, or a sync/async callable.
        dimension: Vector length; required for callables.
        **kwargs: Constructor arguments for a named backend.
    """
    if embedder is None:
        return get_default_embedder()
    if isinstance(embedder, Embedder):
        return embedder
    if isinstance(embedder, str):
        return get_embedder_by_name(embedder, **kwargs)
    if callable(embedder):
        if dimension is None:
            raise ValueError("dimension is required for a callable embedder")
        return CallableEmbedder(embedder, dimension=dimension)

    raise TypeError(f"Cannot build an embedder from {type(embedder).__name__}")
