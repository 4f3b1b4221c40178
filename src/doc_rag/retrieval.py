from __future__ import annotations

from typing import Sequence

import structlog

from .embeddings import cosine_similarity
from .errors import InvalidConfiguration
from .schema import Chunk, RetrievalResult, ScoredCandidate

logger = structlog.get_logger()


def score_corpus(query_vector: Sequence[float], corpus: Sequence[Chunk]) -> list[ScoredCandidate]:
    """Score every chunk in corpus order against one query vector."""
    return [ScoredCandidate(chunk=chunk, score=cosine_similarity(query_vector, chunk.embedding)) for chunk in corpus]


def retrieve(
    query_vector: Sequence[float],
    corpus: Sequence[Chunk],
    top_k: int = 5,
    min_score: float | None = None,
) -> RetrievalResult:
    """Rank the corpus by cosine similarity and keep the best candidates.

    Args:
        query_vector: Embedded question.
        corpus: Every stored chunk; insertion order only matters for ties.
        top_k: Maximum number of candidates to return.
        min_score: Optional strict lower bound. Candidates scoring at or below
            it are dropped before ranking.

    Returns:
        Candidates sorted by descending score, ties kept in corpus order.
        Empty when the corpus is empty or nothing clears the threshold.
    """
    if top_k < 1:
        raise InvalidConfiguration(f"top_k must be at least 1, got {top_k}")

    candidates = score_corpus(query_vector, corpus)
    if min_score is not None:
        candidates = [candidate for candidate in candidates if candidate.score > min_score]

    # sorted() is stable, so equal scores keep their corpus order
    ranked = sorted(candidates, key=lambda candidate: candidate.score, reverse=True)[:top_k]
    logger.debug(
        "retrieval_complete",
        corpus_size=len(corpus),
        kept=len(ranked),
        top_k=top_k,
        min_score=min_score,
    )
    return RetrievalResult(candidates=ranked)
