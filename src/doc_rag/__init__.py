"""Retrieval-augmented question answering over uploaded documents."""

from .errors import (
    EmbeddingError,
    EmptyInput,
    ExtractionError,
    GenerationError,
    InvalidConfiguration,
    RagError,
    StoreError,
)
from .schema import Chunk, IngestReport, QueryAnswer, RawDocument, RetrievalResult, ScoredCandidate

__all__ = [
    "Chunk",
    "RawDocument",
    "ScoredCandidate",
    "RetrievalResult",
    "IngestReport",
    "QueryAnswer",
    "RagError",
    "InvalidConfiguration",
    "ExtractionError",
    "EmbeddingError",
    "GenerationError",
    "EmptyInput",
    "StoreError",
]
