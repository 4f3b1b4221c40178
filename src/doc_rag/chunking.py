from __future__ import annotations

from .errors import InvalidConfiguration


def _check_window(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0 or overlap < 0 or chunk_size <= overlap:
        raise InvalidConfiguration(
            f"chunk_size ({chunk_size}) must be greater than overlap ({overlap}) "
            "and overlap must not be negative"
        )


def window_offsets(text_length: int, chunk_size: int, overlap: int) -> list[int]:
    """Return the start offset of every window taken over a text.

    Windows advance by `chunk_size - overlap` and stop once one reaches the
    end of the text, so the tail is never repeated as an extra fully
    overlapped window.

    Args:
        text_length: Number of characters in the text.
        chunk_size: Window width in characters.
        overlap: Characters shared by consecutive windows.

    Returns:
        Start offsets in increasing order.
    """
    _check_window(chunk_size, overlap)
    offsets: list[int] = []
    start = 0
    while start < text_length:
        offsets.append(start)
        if start + chunk_size >= text_length:
            break
        start += chunk_size - overlap
    return offsets


def split_text(text: str, chunk_size: int = 500, overlap: int = 100) -> list[str]:
    """Split text into overlapping fixed-width character chunks.

    Boundaries are positional, so a chunk may start or end mid-word. Each
    window is whitespace-trimmed and dropped when nothing is left.

    Args:
        text: Extracted document text.
        chunk_size: Maximum number of characters per chunk.
        overlap: Characters repeated at the start of the next window.

    Returns:
        Non-empty trimmed chunks in document order.

    Raises:
        InvalidConfiguration: If `chunk_size <= overlap` or `overlap < 0`.
    """
    chunks: list[str] = []
    for start in window_offsets(len(text), chunk_size, overlap):
        segment = text[start : start + chunk_size].strip()
        if segment:
            chunks.append(segment)
    return chunks
