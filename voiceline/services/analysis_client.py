"""Sales-call analysis on top of the Gemini inference backend."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Protocol

from .gemini import ArtifactReference
from .response_contract import AnalysisRecord, ResponseParseError, parse_analysis

logger = logging.getLogger(__name__)

SALES_PROMPT = """Act as a Sales Assistant. Analyze this audio and return a JSON object with exactly these fields (no markdown, no code block, only valid JSON):
- summary (string): brief summary of the conversation
- action_items (array of strings): list of follow-up actions
- sentiment (string): one of "positive", "neutral", "negative"
- urgency_score (number): integer from 1 to 10
- client_name (string): name of the client or contact mentioned

Return only the JSON object, nothing else."""


class InferenceBackend(Protocol):
    async def upload_artifact(self, path: Path, mime_type: str) -> ArtifactReference:
        ...

    async def delete_artifact(self, artifact: ArtifactReference) -> None:
        ...

    async def generate(self, prompt: str, artifact: ArtifactReference) -> str:
        ...


class AnalysisError(RuntimeError):
    """Raised when the inference backend cannot produce an analysis record."""

    stage = "analysis"


class ArtifactUploadError(AnalysisError):
    stage = "upload"


class GenerationError(AnalysisError):
    stage = "generate"


class EmptyResponseError(AnalysisError):
    stage = "empty_response"


class AnalysisParseError(AnalysisError):
    stage = "parse"


class AnalysisTimeoutError(AnalysisError):
    stage = "timeout"


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


class CallAnalysisClient:
    """Upload a staged recording, prompt the model, and normalize its answer."""

    def __init__(
        self,
        backend: InferenceBackend,
        *,
        timeout_seconds: float = 60.0,
        cleanup_timeout_seconds: float = 10.0,
        prompt: str = SALES_PROMPT,
    ) -> None:
        self._backend = backend
        self._timeout = timeout_seconds
        self._cleanup_timeout = cleanup_timeout_seconds
        self._prompt = prompt

    async def analyze(self, audio_path: Path, mime_type: str) -> AnalysisRecord:
        """Return the analysis record for the audio at ``audio_path``.

        The timeout covers upload and generation together. Expiry cancels
        whichever call is in flight and raises :class:`AnalysisTimeoutError`.
        """

        try:
            return await asyncio.wait_for(
                self._analyze(audio_path, mime_type),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise AnalysisTimeoutError(
                f"analysis timed out after {self._timeout:g}s"
            ) from exc

    async def _analyze(self, audio_path: Path, mime_type: str) -> AnalysisRecord:
        async with self._uploaded_artifact(audio_path, mime_type) as artifact:
            try:
                text = await self._backend.generate(self._prompt, artifact)
            except Exception as exc:
                raise GenerationError(f"generate content: {exc}") from exc

        if not text or not text.strip():
            raise EmptyResponseError("empty response from model")

        logger.debug("Gemini raw response: %s", _truncate(text))

        try:
            return parse_analysis(text)
        except ResponseParseError as exc:
            raise AnalysisParseError(f"parse analysis: {exc}") from exc

    @asynccontextmanager
    async def _uploaded_artifact(
        self,
        audio_path: Path,
        mime_type: str,
    ) -> AsyncIterator[ArtifactReference]:
        """Upload the recording and delete it from the backend on exit."""

        try:
            artifact = await self._backend.upload_artifact(audio_path, mime_type)
        except Exception as exc:
            raise ArtifactUploadError(f"upload audio: {exc}") from exc

        try:
            yield artifact
        finally:
            await self._delete_quietly(artifact)

    async def _delete_quietly(self, artifact: ArtifactReference) -> None:
        try:
            await asyncio.wait_for(
                self._backend.delete_artifact(artifact),
                timeout=self._cleanup_timeout,
            )
        except Exception as exc:
            logger.warning("Could not delete uploaded artifact %s: %s", artifact.name, exc)


__all__ = [
    "AnalysisError",
    "AnalysisParseError",
    "AnalysisTimeoutError",
    "ArtifactUploadError",
    "CallAnalysisClient",
    "EmptyResponseError",
    "GenerationError",
    "InferenceBackend",
    "SALES_PROMPT",
]
