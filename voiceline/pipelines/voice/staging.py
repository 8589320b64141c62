"""Transient staging of uploads (Stage 02 of the voice pipeline)."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, BinaryIO

logger = logging.getLogger("voiceline.pipelines.voice")

_COPY_CHUNK_BYTES = 1 << 20


class StagingError(RuntimeError):
    """Raised when the upload cannot be written to transient storage."""


def _copy_and_sync(source: BinaryIO, target: BinaryIO) -> None:
    source.seek(0)
    shutil.copyfileobj(source, target, _COPY_CHUNK_BYTES)
    target.flush()
    os.fsync(target.fileno())


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove staged upload %s: %s", path, exc)


@asynccontextmanager
async def staged_upload(
    source: BinaryIO,
    extension: str,
    *,
    directory: str | None = None,
    timeout_seconds: float = 30.0,
) -> AsyncIterator[Path]:
    """Write ``source`` to a unique ``voiceline-*<extension>`` file.

    The file is fsynced before the path is yielded and removed on every exit
    path, including cancellation and staging failures.
    """

    try:
        fd, name = tempfile.mkstemp(prefix="voiceline-", suffix=extension, dir=directory)
    except OSError as exc:
        raise StagingError("failed to create temp file") from exc

    path = Path(name)
    target = os.fdopen(fd, "wb")
    try:
        try:
            await asyncio.wait_for(
                asyncio.to_thread(_copy_and_sync, source, target),
                timeout=timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise StagingError("failed to save upload: timed out") from exc
        except (OSError, ValueError) as exc:
            raise StagingError("failed to save upload") from exc
        finally:
            target.close()

        yield path
    finally:
        _remove_quietly(path)


__all__ = ["StagingError", "staged_upload"]
