from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np
from openai import OpenAI, OpenAIError

from .errors import EmbeddingError


class Embedder(Protocol):
    def embed(self, text: str) -> list[float]: ...


class OpenAIEmbedder:
    """Embedding service backed by the OpenAI embeddings API."""

    def __init__(self, model: str = "text-embedding-3-small", client: OpenAI | None = None):
        self.model = model
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI()
        return self._client

    def embed(self, text: str) -> list[float]:
        """Embed one text span.

        Args:
            text: Chunk or question text.

        Returns:
            Embedding vector as a list of floats.

        Raises:
            EmbeddingError: If the API call fails or returns no vector.
        """
        try:
            response = self.client.embeddings.create(model=self.model, input=text)
        except OpenAIError as exc:
            raise EmbeddingError(str(exc)) from exc

        if not response.data or not response.data[0].embedding:
            raise EmbeddingError(f"Embedding model {self.model} returned an empty vector")
        return list(response.data[0].embedding)


def _as_vectors(a: Sequence[float] | None, b: Sequence[float] | None):
    if a is None or b is None or len(a) == 0 or len(b) == 0 or len(a) != len(b):
        return None
    return np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)


def checked_cosine_similarity(a: Sequence[float] | None, b: Sequence[float] | None) -> float | None:
    """Cosine similarity, or None when either vector cannot be scored.

    Unlike `cosine_similarity`, an orthogonal pair (0.0) is distinguishable
    from an empty, mismatched or zero-norm pair (None).
    """
    vectors = _as_vectors(a, b)
    if vectors is None:
        return None
    left, right = vectors
    denominator = float(np.linalg.norm(left) * np.linalg.norm(right))
    if denominator == 0.0:
        return None
    return float(np.dot(left, right) / denominator)


def cosine_similarity(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """Compute cosine similarity between two vectors.

    Returns 0.0 instead of raising when either vector is empty or missing, the
    lengths differ, or either norm is zero.
    """
    score = checked_cosine_similarity(a, b)
    return 0.0 if score is None else score
