from __future__ import annotations

import threading
import uuid
from pathlib import Path
from typing import Protocol, Sequence

import chromadb
import structlog
from chromadb.errors import ChromaError

from .errors import InvalidConfiguration, StoreError
from .schema import Chunk
from .settings import Paths, StoreSettings

logger = structlog.get_logger()


class CorpusStore(Protocol):
    """Append-only chunk store shared by ingestion and query."""

    def append(self, chunks: Sequence[Chunk]) -> None: ...

    def fetch_all(self) -> list[Chunk]: ...

    def count(self) -> int: ...


class InMemoryCorpusStore:
    """Process-local store; concurrent appends and full reads are serialised."""

    def __init__(self, chunks: Sequence[Chunk] | None = None) -> None:
        self._chunks: list[Chunk] = list(chunks or [])
        self._lock = threading.Lock()

    def append(self, chunks: Sequence[Chunk]) -> None:
        with self._lock:
            self._chunks.extend(chunks)

    def fetch_all(self) -> list[Chunk]:
        with self._lock:
            return list(self._chunks)

    def count(self) -> int:
        with self._lock:
            return len(self._chunks)


class ChromaCorpusStore:
    """Persistent corpus kept in a local Chroma collection.

    Chroma is only used as durable storage here; ranking is done by
    `retrieval.retrieve` over `fetch_all()`.
    """

    def __init__(self, collection_name: str = "documents", persist_dir: str = "artifacts/chroma"):
        """Open (or create) the named collection under `persist_dir`.

        Args:
            collection_name: Chroma collection name.
            persist_dir: Local path for Chroma persistence.
        """
        Path(persist_dir).mkdir(parents=True, exist_ok=True)
        self.collection_name = collection_name
        self._client = chromadb.PersistentClient(path=persist_dir)
        self.collection = self._client.get_or_create_collection(name=collection_name)
        self.max_batch_size = self._client.get_max_batch_size()

    def append(self, chunks: Sequence[Chunk]) -> None:
        """Add chunks in slices no larger than the client's max batch size.

        Raises:
            StoreError: If Chroma rejects a slice (e.g. an embedding of the
                wrong dimension). Slices added before the failure stay stored.
        """
        if not chunks:
            return
        for start in range(0, len(chunks), self.max_batch_size):
            batch = chunks[start : start + self.max_batch_size]
            try:
                self.collection.add(
                    ids=[uuid.uuid4().hex for _ in batch],
                    embeddings=[list(chunk.embedding) for chunk in batch],
                    documents=[chunk.text for chunk in batch],
                    metadatas=[{"source": chunk.source_id} for chunk in batch],
                )
            except (ChromaError, ValueError) as exc:
                raise StoreError(f"Chroma rejected {len(batch)} chunk(s): {exc}") from exc
        logger.debug("chunks_appended", collection=self.collection_name, count=len(chunks))

    def fetch_all(self) -> list[Chunk]:
        response = self.collection.get(include=["documents", "embeddings", "metadatas"])
        documents = response["documents"] or []
        embeddings = response["embeddings"]
        if embeddings is None:
            embeddings = []
        metadatas = response["metadatas"] or []
        return [
            Chunk(
                text=text,
                source_id=(metadata or {}).get("source", ""),
                embedding=tuple(float(value) for value in embedding),
            )
            for text, embedding, metadata in zip(documents, embeddings, metadatas, strict=True)
        ]

    def count(self) -> int:
        return self.collection.count()

    def reset(self) -> None:
        """Drop every stored chunk by recreating the collection."""
        self._client.delete_collection(self.collection_name)
        self.collection = self._client.create_collection(name=self.collection_name)


def build_store(store_settings: StoreSettings, paths: Paths) -> CorpusStore:
    """Create the corpus store selected by configuration.

    Args:
        store_settings: Backend name (`chroma` or `memory`) and collection name.
        paths: Project paths; `chroma_dir` is used for the Chroma backend.

    Returns:
        A ready-to-use corpus store.
    """
    if store_settings.backend == "memory":
        return InMemoryCorpusStore()
    if store_settings.backend == "chroma":
        return ChromaCorpusStore(collection_name=store_settings.collection_name, persist_dir=paths.chroma_dir)
    raise InvalidConfiguration(f"Unknown store backend {store_settings.backend!r}; expected 'chroma' or 'memory'")
