"""Plain-text extraction for uploaded documents.

PDFs are read with PyMuPDF; `.txt` and `.md` uploads are decoded as UTF-8.
"""
from __future__ import annotations

from pathlib import PurePath
from typing import Protocol

import fitz  # PyMuPDF

from .errors import ExtractionError

PDF_MAGIC = b"%PDF"
TEXT_SUFFIXES = {".txt", ".md"}


class TextExtractor(Protocol):
    def extract(self, data: bytes, source_id: str = "") -> str: ...


def _extract_pdf(data: bytes, source_id: str) -> str:
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            if doc.page_count == 0:
                raise ExtractionError(f"PDF {source_id or '<bytes>'} has no pages")
            return "\n".join(page.get_text() for page in doc)
    except (fitz.FileDataError, RuntimeError, ValueError) as exc:
        raise ExtractionError(f"Could not read PDF {source_id or '<bytes>'}: {exc}") from exc


def extract_text(data: bytes, source_id: str = "") -> str:
    """Extract plain text from raw file bytes.

    Args:
        data: Uploaded file contents.
        source_id: Original filename; its suffix picks the decoder when the
            bytes are not a PDF.

    Returns:
        Extracted text, possibly empty for image-only PDFs.

    Raises:
        ExtractionError: For corrupt PDFs, undecodable text, or unsupported types.
    """
    suffix = PurePath(source_id).suffix.lower()
    if data.startswith(PDF_MAGIC) or suffix == ".pdf":
        return _extract_pdf(data, source_id)
    if suffix in TEXT_SUFFIXES:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ExtractionError(f"{source_id} is not valid UTF-8 text: {exc}") from exc
    raise ExtractionError(f"Unsupported document type for {source_id or '<bytes>'}")


class PdfTextExtractor:
    """Extractor object handed to the ingestion pipeline."""

    def extract(self, data: bytes, source_id: str = "") -> str:
        return extract_text(data, source_id)
