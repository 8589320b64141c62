"""Thin google-genai wrapper for the Gemini Files and generation APIs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactReference:
    """Handle for an audio file uploaded to the Gemini Files API."""

    name: str
    uri: str
    mime_type: str


class GeminiInferenceBackend:
    """Upload audio, prompt Gemini against it, and delete it afterwards."""

    def __init__(self, api_key: str, model: str) -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def upload_artifact(self, path: Path, mime_type: str) -> ArtifactReference:
        """Upload ``path`` through the Files API and return its reference."""

        uploaded = await self._client.aio.files.upload(
            file=str(path),
            config=types.UploadFileConfig(mime_type=mime_type),
        )
        return ArtifactReference(
            name=uploaded.name or "",
            uri=uploaded.uri or "",
            mime_type=uploaded.mime_type or mime_type,
        )

    async def delete_artifact(self, artifact: ArtifactReference) -> None:
        await self._client.aio.files.delete(name=artifact.name)

    async def generate(self, prompt: str, artifact: ArtifactReference) -> str:
        """Run one generation request over ``prompt`` plus the uploaded audio."""

        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=prompt),
                    types.Part.from_uri(
                        file_uri=artifact.uri,
                        mime_type=artifact.mime_type,
                    ),
                ],
            )
        ]
        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=contents,
        )
        return response.text or ""


__all__ = ["ArtifactReference", "GeminiInferenceBackend"]
