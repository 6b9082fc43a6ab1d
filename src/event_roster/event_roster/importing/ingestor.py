from __future__ import annotations

import asyncio
import logging
from typing import BinaryIO, Callable, Optional

from ..core.constants import CSV_MEDIA_TYPES, DEFAULT_CHUNK_SIZE, DEFAULT_MAX_UPLOAD_BYTES, GENERIC_MEDIA_TYPES
from ..core.exceptions import ReadError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def is_delimited_text(media_type: Optional[str], filename: Optional[str]) -> bool:
    base = (media_type or "").split(";", 1)[0].strip().lower()
    if base in CSV_MEDIA_TYPES:
        return True
    return base in GENERIC_MEDIA_TYPES and (filename or "").lower().endswith(".csv")


async def read_upload(
    stream: BinaryIO,
    *,
    filename: Optional[str] = None,
    media_type: Optional[str] = None,
    total_bytes: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> str:
    """Read an uploaded CSV file and return its UTF-8 text.

    Chunks are read in a worker thread so the event loop stays free. When
    `total_bytes` is unknown the progress callback only receives the final 1.0.
    """
    if not is_delimited_text(media_type, filename):
        raise ReadError(f"Unsupported file type {media_type or 'unknown'!r}; please upload a .csv file.")

    chunk_size = max(1, int(chunk_size))
    received = 0
    last = 0.0
    parts: list[bytes] = []

    def report(fraction: float) -> None:
        nonlocal last
        fraction = min(1.0, max(last, fraction))
        last = fraction
        if on_progress is not None:
            on_progress(fraction)

    while True:
        try:
            chunk = await asyncio.to_thread(stream.read, chunk_size)
        except OSError as exc:
            raise ReadError("Could not read the selected file. It might be corrupted or inaccessible.") from exc
        if not chunk:
            break
        received += len(chunk)
        if received > max_bytes:
            raise ReadError(f"File is larger than the {max_bytes // 1024} KiB upload limit.")
        parts.append(chunk)
        if total_bytes:
            report(received / total_bytes)

    report(1.0)

    try:
        text = b"".join(parts).decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ReadError("CSV must be UTF-8 encoded.") from exc

    logger.info("Read %s (%d bytes)", filename or "upload", received)
    return text
