"""Upload format and size validation."""

import logging
from pathlib import Path

from fastapi import UploadFile

from framecast.models.errors import UploadRejected

logger = logging.getLogger(__name__)

# Extension used for blob uploads, which arrive without a meaningful filename.
MIME_EXTENSIONS = {
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/x-msvideo": "avi",
    "video/avi": "avi",
    "video/x-ms-wmv": "wmv",
    "video/x-flv": "flv",
    "video/x-matroska": "mkv",
    "video/webm": "webm",
}


def _base_mime(content_type: str | None) -> str:
    # "video/webm;codecs=vp9" -> "video/webm"
    return (content_type or "").split(";", 1)[0].strip().lower()


def validate_file_format(filename: str, allowed_formats: list[str]) -> str:
    """Validate that the filename has an allowed extension; returns the extension."""
    ext = Path(filename).suffix.lstrip(".").lower()
    if ext not in allowed_formats:
        raise UploadRejected(
            f"Only video files are allowed! Supported formats: {', '.join(allowed_formats)}",
            details={"extension": ext, "allowed": allowed_formats},
        )
    return ext


def validate_mime_type(content_type: str | None, allowed_types: list[str]) -> str:
    """Validate the declared MIME type against the video allow-list."""
    mime = _base_mime(content_type)
    if mime not in allowed_types:
        raise UploadRejected(
            f"Unsupported content type: {mime or 'unknown'}",
            details={"content_type": mime, "allowed": allowed_types},
        )
    return mime


def extension_for_mime(content_type: str | None) -> str:
    return MIME_EXTENSIONS.get(_base_mime(content_type), "mp4")


def size_limit_message(max_bytes: int) -> str:
    return f"Video file size too large. Maximum size is {max_bytes // (1024 * 1024)}MB"


async def save_upload(
    upload: UploadFile,
    destination: Path,
    max_bytes: int,
    chunk_size: int = 1024 * 1024,
) -> int:
    """Stream an upload to ``destination``, enforcing the size ceiling.

    The partial file is removed if the ceiling is exceeded or the upload is empty.
    Returns the number of bytes written.
    """
    written = 0
    try:
        with open(destination, "wb") as f:
            while chunk := await upload.read(chunk_size):
                written += len(chunk)
                if written > max_bytes:
                    raise UploadRejected(
                        size_limit_message(max_bytes),
                        details={"max_bytes": max_bytes},
                    )
                f.write(chunk)
        if written == 0:
            raise UploadRejected("Uploaded video file is empty")
    except BaseException:
        destination.unlink(missing_ok=True)
        raise
    logger.info(f"Saved upload {upload.filename!r} to {destination.name} ({written} bytes)")
    return written
