"""Tests for retrieval.py: scoring, thresholding, ranking and truncation."""
from __future__ import annotations

import pytest

from doc_rag.errors import InvalidConfiguration
from doc_rag.retrieval import retrieve, score_corpus
from doc_rag.schema import Chunk, RetrievalResult


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_chunk(text: str, embedding: list[float], source_id: str = "doc.pdf") -> Chunk:
    return Chunk(text=text, source_id=source_id, embedding=embedding)


# ---------------------------------------------------------------------------
# score_corpus
# ---------------------------------------------------------------------------

class TestScoreCorpus:
    def test_scores_align_with_corpus_order(self, sample_chunks):
        scored = score_corpus([1.0, 0.0], sample_chunks)
        assert [c.chunk for c in scored] == sample_chunks
        assert scored[0].score == pytest.approx(1.0)
        assert scored[1].score == pytest.approx(0.0)
        assert scored[2].score == pytest.approx(0.7071, abs=1e-4)

    def test_malformed_embedding_scores_zero(self):
        scored = score_corpus([1.0, 0.0], [_make_chunk("bad", [1.0, 0.0, 0.0])])
        assert scored[0].score == 0.0


# ---------------------------------------------------------------------------
# retrieve
# ---------------------------------------------------------------------------

class TestRetrieve:
    def test_top_k_truncates_after_ranking(self, sample_chunks):
        result = retrieve([1.0, 0.0], sample_chunks, top_k=2)
        assert isinstance(result, RetrievalResult)
        assert [c.chunk for c in result] == [sample_chunks[0], sample_chunks[2]]
        assert result.candidates[0].score == pytest.approx(1.0)
        assert result.candidates[1].score == pytest.approx(0.7071, abs=1e-4)

    def test_min_score_filters_strictly(self, sample_chunks):
        result = retrieve([1.0, 0.0], sample_chunks, top_k=2, min_score=0.8)
        assert [c.chunk for c in result] == [sample_chunks[0]]

    def test_candidate_exactly_at_threshold_is_excluded(self):
        corpus = [_make_chunk("exact", [1.0, 0.0]), _make_chunk("orthogonal", [0.0, 1.0])]
        result = retrieve([1.0, 0.0], corpus, top_k=5, min_score=1.0)
        assert result.is_empty

    def test_zero_threshold_drops_orthogonal_chunks(self, sample_chunks):
        result = retrieve([1.0, 0.0], sample_chunks, top_k=5, min_score=0.0)
        assert sample_chunks[1] not in [c.chunk for c in result]

    def test_no_threshold_keeps_negative_scores(self):
        corpus = [_make_chunk("opposite", [-1.0, 0.0])]
        result = retrieve([1.0, 0.0], corpus, top_k=3)
        assert len(result) == 1
        assert result.candidates[0].score == pytest.approx(-1.0)

    def test_never_returns_more_than_top_k(self):
        corpus = [_make_chunk(f"c{i}", [1.0, float(i)]) for i in range(20)]
        for k in (1, 3, 7, 50):
            assert len(retrieve([1.0, 0.5], corpus, top_k=k)) <= k

    def test_sorted_descending(self):
        corpus = [_make_chunk(f"c{i}", [float(i % 5), 1.0]) for i in range(12)]
        scores = [c.score for c in retrieve([1.0, 0.0], corpus, top_k=12)]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_corpus_order(self):
        corpus = [
            _make_chunk("first", [2.0, 0.0]),
            _make_chunk("other", [0.0, 1.0]),
            _make_chunk("second", [1.0, 0.0]),
            _make_chunk("third", [5.0, 0.0]),
        ]
        result = retrieve([1.0, 0.0], corpus, top_k=3)
        assert result.texts() == ["first", "second", "third"]

    def test_empty_corpus_returns_empty_result(self):
        result = retrieve([1.0, 0.0], [], top_k=3)
        assert result.is_empty
        assert len(result) == 0

    def test_does_not_reorder_input(self, sample_chunks):
        before = list(sample_chunks)
        retrieve([0.0, 1.0], sample_chunks, top_k=1)
        assert sample_chunks == before

    @pytest.mark.parametrize("top_k", [0, -3])
    def test_invalid_top_k_raises(self, sample_chunks, top_k):
        with pytest.raises(InvalidConfiguration):
            retrieve([1.0, 0.0], sample_chunks, top_k=top_k)
