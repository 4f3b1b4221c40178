from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass(slots=True)
class RawDocument:
    """Uploaded file contents paired with the name it was uploaded under."""

    source_id: str
    data: bytes


@dataclass(slots=True, frozen=True)
class Chunk:
    """Trimmed slice of a document's text with its embedding attached."""

    text: str
    source_id: str
    embedding: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "embedding", tuple(self.embedding))


@dataclass(slots=True, frozen=True)
class ScoredCandidate:
    """Chunk paired with its similarity to one query vector."""

    chunk: Chunk
    score: float

    def to_payload(self) -> dict:
        return {"text": self.chunk.text, "sourceId": self.chunk.source_id, "score": self.score}


@dataclass(slots=True)
class RetrievalResult:
    """Ranked candidates for one query, best first."""

    candidates: list[ScoredCandidate] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self) -> Iterator[ScoredCandidate]:
        return iter(self.candidates)

    @property
    def is_empty(self) -> bool:
        return not self.candidates

    def texts(self) -> list[str]:
        return [candidate.chunk.text for candidate in self.candidates]


@dataclass(slots=True)
class IngestReport:
    """Counts returned to the caller after one ingest request."""

    documents_processed: int
    chunks_stored: int
    total_stored_chunks: int
    failed_documents: list[str] = field(default_factory=list)

    def to_payload(self) -> dict:
        return {
            "message": f"{self.documents_processed} file(s) processed and stored successfully!",
            "documentsProcessed": self.documents_processed,
            "chunksStored": self.chunks_stored,
            "totalStoredChunks": self.total_stored_chunks,
        }


@dataclass(slots=True)
class QueryAnswer:
    """Generated answer plus the ranked chunks that were put in the prompt."""

    question: str
    answer: str
    ranked_chunks: RetrievalResult

    def to_payload(self) -> dict:
        return {
            "question": self.question,
            "answer": self.answer,
            "rankedChunks": [candidate.to_payload() for candidate in self.ranked_chunks],
        }
