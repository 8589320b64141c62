"""Request ingestion helpers (Stage 01 of the voice pipeline)."""

from __future__ import annotations

import os
from typing import Final, Mapping

from starlette.datastructures import UploadFile

from .types import AudioSubmission

MULTIPART_FIELD: Final[str] = "file"
MAX_AUDIO_BYTES: Final[int] = 25 << 20

ALLOWED_CONTENT_TYPES: Final[Mapping[str, str]] = {
    ".wav": "audio/wav",
    ".mp3": "audio/mpeg",
    ".webm": "audio/webm",
}


class SubmissionValidationError(RuntimeError):
    """Raised when an upload is missing, too large, or of an unsupported type."""


def submission_from_upload(upload: object) -> AudioSubmission | None:
    """Wrap a parsed multipart value; anything but a file part yields ``None``."""

    if not isinstance(upload, UploadFile):
        return None

    size = upload.size
    if size is None:
        stream = upload.file
        position = stream.tell()
        size = stream.seek(0, os.SEEK_END)
        stream.seek(position)

    return AudioSubmission(
        filename=upload.filename or "",
        size=size,
        stream=upload.file,
    )


def resolve_content_type(filename: str) -> tuple[str, str]:
    """Return ``(extension, content_type)`` for an allowed audio filename."""

    # A bare ".wav" name counts as a .wav file.
    _, extension = os.path.splitext("x" + os.path.basename(filename))
    extension = extension.lower()
    content_type = ALLOWED_CONTENT_TYPES.get(extension)
    if content_type is None:
        raise SubmissionValidationError("only .wav, .mp3, and .webm are supported")
    return extension, content_type


def validate_submission(
    submission: AudioSubmission | None,
    max_bytes: int = MAX_AUDIO_BYTES,
) -> tuple[str, str]:
    """Check presence, size, and extension before anything touches disk."""

    if submission is None:
        raise SubmissionValidationError(
            "missing or invalid file; use form key 'file' with .wav, .mp3, or .webm"
        )
    if submission.size > max_bytes:
        raise SubmissionValidationError(
            f"file too large (max {max_bytes // (1 << 20)}MB)"
        )
    return resolve_content_type(submission.filename)


__all__ = [
    "ALLOWED_CONTENT_TYPES",
    "MAX_AUDIO_BYTES",
    "MULTIPART_FIELD",
    "SubmissionValidationError",
    "resolve_content_type",
    "submission_from_upload",
    "validate_submission",
]
