from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from .schema import Chunk, RawDocument


def _load_jsonl(path: str | Path) -> list[dict]:
    records: list[dict] = []
    with Path(path).open("r", encoding="utf-8") as file_handle:
        for line in file_handle:
            if line.strip():
                records.append(json.loads(line))
    return records


def load_raw_documents(paths: Sequence[str | Path]) -> list[RawDocument]:
    return [RawDocument(source_id=Path(path).name, data=Path(path).read_bytes()) for path in paths]


def save_chunks(chunks: Sequence[Chunk], path: str | Path) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)

    with destination.open("w", encoding="utf-8") as file_handle:
        for chunk in chunks:
            record = {"text": chunk.text, "source_id": chunk.source_id, "embedding": list(chunk.embedding)}
            file_handle.write(json.dumps(record) + "\n")


def load_chunks(path: str | Path) -> list[Chunk]:
    return [
        Chunk(text=record["text"], source_id=record["source_id"], embedding=tuple(record["embedding"]))
        for record in _load_jsonl(path)
    ]
