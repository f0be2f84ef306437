"""Upload path selection and request body helpers for loads and file uploads."""

import json
import mimetypes
import uuid
from enum import Enum
from pathlib import Path
from typing import Any

from gcloud_resources.errors import UnsupportedSource

# Resumable chunk sizes must be multiples of 256 KiB
CHUNK_ALIGNMENT = 256 * 1024

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class SourceKind(str, Enum):
    """How a load/upload source will be sent."""

    STORAGE = "storage"
    MULTIPART = "multipart"
    RESUMABLE = "resumable"


def storage_url(source: object) -> str | None:
    """Return the gs:// URL for a storage reference, or None.

    A storage reference is either a ``gs://`` string or an object exposing
    a ``gs_url`` attribute (such as a storage File).
    """
    gs_url = getattr(source, "gs_url", None)
    if isinstance(gs_url, str):
        return gs_url
    if isinstance(source, str) and source.lower().startswith("gs://"):
        return source
    return None


def local_file(source: object) -> Path | None:
    """Return the path when the source names an existing regular file."""
    if not isinstance(source, (str, Path)):
        return None
    try:
        path = Path(source)
        return path if path.is_file() else None
    except (OSError, ValueError):
        return None


def is_resumable(size: int, threshold: int) -> bool:
    """Files strictly larger than the threshold use resumable uploads."""
    return size > threshold


def classify_source(source: object, threshold: int) -> SourceKind:
    """Decide how a data source is sent.

    Args:
        source: gs:// URL, object with ``gs_url``, or local file path.
        threshold: Resumable upload threshold in bytes.

    Returns:
        The upload path to use.

    Raises:
        UnsupportedSource: If the source is neither a storage reference
            nor an existing local file.
    """
    if storage_url(source) is not None:
        return SourceKind.STORAGE
    path = local_file(source)
    if path is None:
        raise UnsupportedSource(source)
    if is_resumable(path.stat().st_size, threshold):
        return SourceKind.RESUMABLE
    return SourceKind.MULTIPART


def verify_chunk_size(chunk_size: int | None) -> int | None:
    """Round a chunk size down to the 256 KiB alignment.

    Args:
        chunk_size: Requested chunk size in bytes.

    Returns:
        The aligned size, or None when it rounds to zero (use the
        server default and send the file in one request).
    """
    aligned = (int(chunk_size or 0) // CHUNK_ALIGNMENT) * CHUNK_ALIGNMENT
    if aligned <= 0:
        return None
    return aligned


def guess_content_type(path: Path | str) -> str:
    """Guess a content type from a file name."""
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or DEFAULT_CONTENT_TYPE


def build_multipart_body(
    metadata: dict[str, Any],
    data: bytes,
    content_type: str,
) -> tuple[bytes, str]:
    """Build a multipart/related body with a JSON metadata part and a data part.

    Returns:
        Tuple of (body bytes, boundary).
    """
    boundary = uuid.uuid4().hex
    parts = [
        f"--{boundary}\r\n".encode(),
        b"Content-Type: application/json; charset=UTF-8\r\n\r\n",
        json.dumps(metadata).encode("utf-8"),
        f"\r\n--{boundary}\r\n".encode(),
        f"Content-Type: {content_type}\r\n\r\n".encode(),
        data,
        f"\r\n--{boundary}--\r\n".encode(),
    ]
    return b"".join(parts), boundary
