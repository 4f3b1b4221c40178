from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Sequence

import structlog

from .chunking import split_text
from .embeddings import Embedder, OpenAIEmbedder
from .errors import EmbeddingError, EmptyInput, RagError
from .extraction import PdfTextExtractor, TextExtractor
from .io_utils import load_raw_documents
from .qa import Generator, OpenAIGenerator, assemble_prompt
from .retrieval import retrieve
from .schema import Chunk, IngestReport, QueryAnswer, RawDocument, RetrievalResult
from .settings import OpenAISettings, RetrievalSettings, Settings
from .vector_store import CorpusStore, build_store

logger = structlog.get_logger()


class IngestionPipeline:
    """Turn uploaded documents into embedded chunks in the corpus store."""

    def __init__(
        self,
        store: CorpusStore,
        embedder: Embedder,
        extractor: TextExtractor,
        settings: RetrievalSettings,
    ):
        self.store = store
        self.embedder = embedder
        self.extractor = extractor
        self.settings = settings.validate()

    def _embed_one(self, source_id: str, index: int, text: str) -> Chunk | None:
        try:
            vector = self.embedder.embed(text)
        except EmbeddingError as exc:
            logger.warning("chunk_embedding_failed", source=source_id, chunk_index=index, error=str(exc))
            return None
        if not vector:
            logger.warning("chunk_embedding_empty", source=source_id, chunk_index=index)
            return None
        return Chunk(text=text, source_id=source_id, embedding=tuple(vector))

    def embed_chunks(self, source_id: str, texts: list[str]) -> list[Chunk]:
        """Embed every chunk of one document concurrently.

        All requests run to completion; a failed or empty embedding drops only
        that chunk. Survivors keep document order.

        Args:
            source_id: Document the chunks came from.
            texts: Trimmed chunk texts.

        Returns:
            Chunks with a non-empty embedding attached.
        """
        if not texts:
            return []
        workers = min(self.settings.embedding_workers, len(texts))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._embed_one, source_id, index, text) for index, text in enumerate(texts)]
            results = [future.result() for future in futures]
        return [chunk for chunk in results if chunk is not None]

    def ingest_document(self, document: RawDocument) -> int | None:
        """Extract, chunk, embed and persist one document.

        Returns:
            Number of chunks stored, or None when the document had no text.
        """
        text = self.extractor.extract(document.data, document.source_id)
        texts = split_text(text, self.settings.chunk_size, self.settings.overlap)
        if not texts:
            logger.warning("document_has_no_text", source=document.source_id)
            return None

        chunks = self.embed_chunks(document.source_id, texts)
        if chunks:
            self.store.append(chunks)
        logger.info(
            "document_ingested",
            source=document.source_id,
            chunks=len(texts),
            stored=len(chunks),
            dropped=len(texts) - len(chunks),
        )
        return len(chunks)

    def ingest(self, documents: Sequence[RawDocument]) -> IngestReport:
        """Ingest a batch of documents, isolating failures per document.

        Raises:
            EmptyInput: If no documents were supplied.
        """
        if not documents:
            raise EmptyInput("No files uploaded.")

        processed = 0
        stored = 0
        failed: list[str] = []
        for document in documents:
            try:
                count = self.ingest_document(document)
            except RagError as exc:
                logger.error("document_ingest_failed", source=document.source_id, error=str(exc))
                failed.append(document.source_id)
                continue
            if count is None:
                continue
            processed += 1
            stored += count

        return IngestReport(
            documents_processed=processed,
            chunks_stored=stored,
            total_stored_chunks=self.store.count(),
            failed_documents=failed,
        )


class QueryPipeline:
    """Answer one question from the accumulated corpus."""

    def __init__(
        self,
        store: CorpusStore,
        embedder: Embedder,
        generator: Generator,
        settings: RetrievalSettings,
        openai_settings: OpenAISettings | None = None,
        retriever: Callable[..., RetrievalResult] = retrieve,
    ):
        self.store = store
        self.embedder = embedder
        self.generator = generator
        self.settings = settings.validate()
        self.openai_settings = openai_settings or OpenAISettings()
        self.retriever = retriever

    def query(self, question: str) -> QueryAnswer:
        """Embed the question, retrieve context, and generate an answer.

        Args:
            question: User question.

        Returns:
            The answer together with the ranked chunks used as context.

        Raises:
            EmptyInput: If the question is blank.
            EmbeddingError: If the question could not be embedded.
            GenerationError: If the chat model call failed.
        """
        if not question or not question.strip():
            raise EmptyInput("No question provided.")

        query_vector = self.embedder.embed(question)
        result = self.retriever(
            query_vector,
            self.store.fetch_all(),
            top_k=self.settings.top_k,
            min_score=self.settings.min_score,
        )
        prompt = assemble_prompt(question, result)
        answer = self.generator.generate(
            prompt,
            max_tokens=self.openai_settings.max_tokens,
            temperature=self.openai_settings.temperature,
        )
        logger.info(
            "query_answered",
            candidates=len(result),
            top_score=None if result.is_empty else result.candidates[0].score,
        )
        return QueryAnswer(question=question, answer=answer, ranked_chunks=result)


class RagService:
    """Both pipelines wired to one shared corpus store."""

    def __init__(
        self,
        store: CorpusStore,
        embedder: Embedder,
        generator: Generator,
        extractor: TextExtractor | None = None,
        retrieval_settings: RetrievalSettings | None = None,
        openai_settings: OpenAISettings | None = None,
    ):
        retrieval_settings = retrieval_settings or RetrievalSettings()
        self.store = store
        self.ingestion = IngestionPipeline(store, embedder, extractor or PdfTextExtractor(), retrieval_settings)
        self.querying = QueryPipeline(store, embedder, generator, retrieval_settings, openai_settings)

    @classmethod
    def from_settings(cls, settings: Settings) -> RagService:
        """Build the store and OpenAI-backed collaborators from configuration."""
        return cls(
            store=build_store(settings.store, settings.paths),
            embedder=OpenAIEmbedder(model=settings.openai.embedding_model),
            generator=OpenAIGenerator(model=settings.openai.chat_model),
            retrieval_settings=settings.retrieval,
            openai_settings=settings.openai,
        )

    def ingest(self, documents: Sequence[RawDocument]) -> IngestReport:
        return self.ingestion.ingest(documents)

    def ingest_files(self, paths: Sequence[str | Path]) -> IngestReport:
        return self.ingestion.ingest(load_raw_documents(paths))

    def query(self, question: str) -> QueryAnswer:
        return self.querying.query(question)
