"""
Record types held by the in-memory vector store.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class Document:
    """A text fragment with its metadata, as seen by callers and filters."""
    page_content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MemoryVector:
    """A stored (content, embedding, metadata) triple. Never mutated after append."""
    content: str
    embedding: List[float]
    metadata: Dict[str, Any]

    def to_document(self) -> Document:
        """Build the caller-facing view. The embedding is not exposed."""
        return Document(page_content=self.content, metadata=dict(self.metadata))
