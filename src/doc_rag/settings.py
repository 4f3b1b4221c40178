from __future__ import annotations

import os
from dataclasses import dataclass, replace

from dotenv import load_dotenv

from .errors import InvalidConfiguration


@dataclass(slots=True)
class OpenAISettings:
    """Runtime model configuration for embedding and generation calls."""

    embedding_model: str = "text-embedding-3-small"
    chat_model: str = "gpt-4o"
    max_tokens: int = 500
    temperature: float = 0.2


@dataclass(slots=True, frozen=True)
class RetrievalSettings:
    """Chunking and ranking knobs shared by ingestion and query.

    `min_score` is a strict lower bound: candidates scoring at or below it are
    dropped. `None` disables the threshold entirely.
    """

    chunk_size: int = 500
    overlap: int = 100
    top_k: int = 5
    min_score: float | None = 0.7
    embedding_workers: int = 8

    def validate(self) -> RetrievalSettings:
        if self.chunk_size <= 0 or self.overlap < 0 or self.chunk_size <= self.overlap:
            raise InvalidConfiguration(
                f"chunk_size ({self.chunk_size}) must be greater than overlap ({self.overlap}) "
                "and overlap must not be negative"
            )
        if self.top_k < 1:
            raise InvalidConfiguration(f"top_k must be at least 1, got {self.top_k}")
        if self.embedding_workers < 1:
            raise InvalidConfiguration(
                f"embedding_workers must be at least 1, got {self.embedding_workers}"
            )
        return self


BASIC_PRESET = RetrievalSettings(chunk_size=100, overlap=20, top_k=3, min_score=None)
STRICT_PRESET = RetrievalSettings(chunk_size=500, overlap=100, top_k=5, min_score=0.7)

PRESETS = {"basic": BASIC_PRESET, "strict": STRICT_PRESET}


@dataclass(slots=True)
class StoreSettings:
    """Which corpus store backend to build and what to call its collection."""

    backend: str = "chroma"
    collection_name: str = "documents"


@dataclass(slots=True)
class Paths:
    """Common project paths used by the store and CLI."""

    data_dir: str = "data"
    artifacts_dir: str = "artifacts"
    chroma_dir: str = "artifacts/chroma"


@dataclass(slots=True)
class Settings:
    openai: OpenAISettings
    retrieval: RetrievalSettings
    store: StoreSettings
    paths: Paths
    log_level: str = "INFO"


def _optional_float(raw: str) -> float | None:
    if raw.strip().lower() in {"", "none", "off"}:
        return None
    return float(raw)


def load_retrieval_settings() -> RetrievalSettings:
    """Resolve the retrieval preset and apply any per-field env overrides.

    Returns:
        Validated retrieval settings.
    """
    preset_name = os.getenv("RAG_PRESET", "strict").lower()
    if preset_name not in PRESETS:
        raise InvalidConfiguration(
            f"Unknown RAG_PRESET {preset_name!r}; expected one of {sorted(PRESETS)}"
        )
    settings = PRESETS[preset_name]

    overrides: dict = {}
    if "RAG_CHUNK_SIZE" in os.environ:
        overrides["chunk_size"] = int(os.environ["RAG_CHUNK_SIZE"])
    if "RAG_CHUNK_OVERLAP" in os.environ:
        overrides["overlap"] = int(os.environ["RAG_CHUNK_OVERLAP"])
    if "RAG_TOP_K" in os.environ:
        overrides["top_k"] = int(os.environ["RAG_TOP_K"])
    if "RAG_MIN_SCORE" in os.environ:
        overrides["min_score"] = _optional_float(os.environ["RAG_MIN_SCORE"])
    if "RAG_EMBEDDING_WORKERS" in os.environ:
        overrides["embedding_workers"] = int(os.environ["RAG_EMBEDDING_WORKERS"])

    return replace(settings, **overrides).validate()


def load_settings() -> Settings:
    """Load environment-backed settings and return typed config objects.

    Returns:
        Settings bundle covering models, retrieval, store, paths and logging.
    """
    load_dotenv()
    artifacts_dir = os.getenv("RAG_ARTIFACTS_DIR", "artifacts")
    return Settings(
        openai=OpenAISettings(
            embedding_model=os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"),
            chat_model=os.getenv("OPENAI_CHAT_MODEL", "gpt-4o"),
            max_tokens=int(os.getenv("OPENAI_MAX_TOKENS", "500")),
            temperature=float(os.getenv("OPENAI_TEMPERATURE", "0.2")),
        ),
        retrieval=load_retrieval_settings(),
        store=StoreSettings(
            backend=os.getenv("RAG_STORE_BACKEND", "chroma"),
            collection_name=os.getenv("RAG_COLLECTION", "documents"),
        ),
        paths=Paths(
            data_dir=os.getenv("RAG_DATA_DIR", "data"),
            artifacts_dir=artifacts_dir,
            chroma_dir=os.getenv("RAG_CHROMA_DIR", f"{artifacts_dir}/chroma"),
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
