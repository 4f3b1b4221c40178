"""Exception types raised by the ingestion and query pipelines."""
from __future__ import annotations


class RagError(Exception):
    """Base class for every error raised by doc_rag."""


class InvalidConfiguration(RagError):
    """Chunking or retrieval parameters that cannot produce a valid run."""


class ExtractionError(RagError):
    """Raw document bytes could not be turned into plain text."""


class EmbeddingError(RagError):
    """The embedding service failed or returned an empty vector."""


class GenerationError(RagError):
    """The chat model failed to produce an answer."""


class EmptyInput(RagError):
    """No documents or no question were supplied."""


class StoreError(RagError):
    """The corpus store rejected a write."""
