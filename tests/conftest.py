"""Shared pytest fixtures for doc_rag unit tests."""
from __future__ import annotations

import pytest

from doc_rag.errors import EmbeddingError, ExtractionError
from doc_rag.schema import Chunk, RawDocument, RetrievalResult, ScoredCandidate
from doc_rag.vector_store import InMemoryCorpusStore


class FakeEmbedder:
    """Deterministic embedder keyed on text; unknown texts get a default vector."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, default=(1.0, 0.0), fail_on=()):
        self.vectors = vectors or {}
        self.default = list(default)
        self.fail_on = set(fail_on)
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if text in self.fail_on:
            raise EmbeddingError(f"rate limited on {text!r}")
        return list(self.vectors.get(text, self.default))


class FakeGenerator:
    def __init__(self, answer: str = "Generated answer.", error: Exception | None = None):
        self.answer = answer
        self.error = error
        self.prompts: list[str] = []
        self.kwargs: list[dict] = []

    def generate(self, prompt: str, max_tokens: int = 500, temperature: float = 0.2) -> str:
        self.prompts.append(prompt)
        self.kwargs.append({"max_tokens": max_tokens, "temperature": temperature})
        if self.error is not None:
            raise self.error
        return self.answer


class TextExtractor:
    """Treats every upload as UTF-8 text; `corrupt` bytes fail extraction."""

    def extract(self, data: bytes, source_id: str = "") -> str:
        if data == b"corrupt":
            raise ExtractionError(f"Could not read {source_id}")
        return data.decode("utf-8")


@pytest.fixture()
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture()
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture()
def text_extractor() -> TextExtractor:
    return TextExtractor()


@pytest.fixture()
def sample_chunks() -> list[Chunk]:
    return [
        Chunk(text="Renewal happens every twelve months.", source_id="contract.pdf", embedding=[1.0, 0.0]),
        Chunk(text="Invoices are due within 30 days.", source_id="contract.pdf", embedding=[0.0, 1.0]),
        Chunk(text="Either party may terminate with notice.", source_id="terms.pdf", embedding=[1.0, 1.0]),
    ]


@pytest.fixture()
def memory_store(sample_chunks) -> InMemoryCorpusStore:
    return InMemoryCorpusStore(sample_chunks)


@pytest.fixture()
def sample_result(sample_chunks) -> RetrievalResult:
    return RetrievalResult(
        candidates=[
            ScoredCandidate(chunk=sample_chunks[0], score=1.0),
            ScoredCandidate(chunk=sample_chunks[2], score=0.7071),
        ]
    )


@pytest.fixture()
def sample_documents() -> list[RawDocument]:
    return [
        RawDocument(source_id="alpha.txt", data=b"ABCDEFGHIJ"),
        RawDocument(source_id="beta.txt", data=b"Short note."),
    ]
