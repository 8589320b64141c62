"""Shared fakes for the Gemini and Sheets backends."""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from voiceline.services import ArtifactReference, CallAnalysisClient, LedgerClient  # noqa: E402

VALID_ANALYSIS = (
    '{"summary": "Discussed renewal", "action_items": ["Send quote", "Book demo"], '
    '"sentiment": "positive", "urgency_score": 9, "client_name": "Acme"}'
)


class FakeInferenceBackend:
    """Records every call and replays a canned model answer."""

    def __init__(
        self,
        text: str = VALID_ANALYSIS,
        *,
        upload_error: Exception | None = None,
        generate_error: Exception | None = None,
        delete_error: Exception | None = None,
        generate_delay: float = 0.0,
    ) -> None:
        self.text = text
        self.upload_error = upload_error
        self.generate_error = generate_error
        self.delete_error = delete_error
        self.generate_delay = generate_delay
        self.uploads: list[tuple[Path, str, bytes]] = []
        self.prompts: list[str] = []
        self.deleted: list[str] = []

    async def upload_artifact(self, path: Path, mime_type: str) -> ArtifactReference:
        if self.upload_error is not None:
            raise self.upload_error
        path = Path(path)
        self.uploads.append((path, mime_type, path.read_bytes()))
        return ArtifactReference(
            name="files/call-1",
            uri="https://generativelanguage.googleapis.com/v1beta/files/call-1",
            mime_type=mime_type,
        )

    async def delete_artifact(self, artifact: ArtifactReference) -> None:
        self.deleted.append(artifact.name)
        if self.delete_error is not None:
            raise self.delete_error

    async def generate(self, prompt: str, artifact: ArtifactReference) -> str:
        self.prompts.append(prompt)
        if self.generate_delay:
            await asyncio.sleep(self.generate_delay)
        if self.generate_error is not None:
            raise self.generate_error
        return self.text


class FakeLedgerBackend:
    """Blocking stand-in for the Sheets values.append call."""

    def __init__(self, *, error: Exception | None = None, delay: float = 0.0) -> None:
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, str, list, str]] = []

    def append_row(self, spreadsheet_id, target_range, values, insert_mode="INSERT_ROWS"):
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.calls.append((spreadsheet_id, target_range, list(values), insert_mode))
        return {"updates": {"updatedRows": 1}}


@pytest.fixture
def inference_backend() -> FakeInferenceBackend:
    return FakeInferenceBackend()


@pytest.fixture
def ledger_backend() -> FakeLedgerBackend:
    return FakeLedgerBackend()


@pytest.fixture
def analysis_client(inference_backend: FakeInferenceBackend) -> CallAnalysisClient:
    return CallAnalysisClient(inference_backend, timeout_seconds=5.0)


@pytest.fixture
def ledger_client(ledger_backend: FakeLedgerBackend) -> LedgerClient:
    return LedgerClient(
        ledger_backend,
        spreadsheet_id="sheet-123",
        append_range="Sheet1!A:F",
        timeout_seconds=5.0,
    )
