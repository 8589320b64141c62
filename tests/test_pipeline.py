"""Voice-to-CRM orchestration: validation, staging, and partial failures."""

from __future__ import annotations

import asyncio
import io

import pytest
from starlette.datastructures import UploadFile

from voiceline.pipelines.voice import (
    STAGE_ANALYZE,
    STAGE_STAGE,
    STAGE_VALIDATE,
    AnalysisOnlyWithPersistError,
    AudioSubmission,
    FullSuccess,
    HardFailure,
    StagingError,
    SubmissionValidationError,
    VoiceToCrmPipeline,
    resolve_content_type,
    staged_upload,
    submission_from_upload,
    validate_submission,
)
from voiceline.services import CallAnalysisClient, LedgerAppendError, LedgerClient

from conftest import FakeInferenceBackend, FakeLedgerBackend

AUDIO = b"RIFF----WAVEfmt fake"


def _submission(filename: str = "call.wav", data: bytes = AUDIO, size: int | None = None):
    return AudioSubmission(
        filename=filename,
        size=len(data) if size is None else size,
        stream=io.BytesIO(data),
    )


def _pipeline(tmp_path, inference=None, ledger=None, **kwargs):
    inference = inference or FakeInferenceBackend()
    ledger = ledger or FakeLedgerBackend()
    pipeline = VoiceToCrmPipeline(
        analysis_client=CallAnalysisClient(inference, timeout_seconds=5.0),
        ledger_client=LedgerClient(ledger, spreadsheet_id="sheet-123"),
        staging_dir=str(tmp_path),
        **kwargs,
    )
    return pipeline, inference, ledger


@pytest.mark.parametrize(
    "filename, extension, content_type",
    [
        ("call.wav", ".wav", "audio/wav"),
        ("CALL.MP3", ".mp3", "audio/mpeg"),
        ("notes.final.WebM", ".webm", "audio/webm"),
        (".wav", ".wav", "audio/wav"),
        ("uploads/.MP3", ".mp3", "audio/mpeg"),
    ],
)
def test_resolve_content_type(filename, extension, content_type):
    assert resolve_content_type(filename) == (extension, content_type)


@pytest.mark.parametrize("filename", ["call.m4a", "call.ogg", "call", "wav", "call.wav.txt", ""])
def test_unsupported_extension_is_rejected(filename):
    with pytest.raises(SubmissionValidationError, match="only .wav, .mp3, and .webm"):
        validate_submission(_submission(filename))


def test_missing_file_is_rejected():
    with pytest.raises(SubmissionValidationError, match="form key 'file'"):
        validate_submission(None)


def test_size_cap_is_inclusive():
    cap = 25 << 20
    assert validate_submission(_submission(size=cap)) == (".wav", "audio/wav")
    with pytest.raises(SubmissionValidationError, match="max 25MB"):
        validate_submission(_submission(size=cap + 1))


def test_full_success_stages_analyzes_and_persists(tmp_path):
    pipeline, inference, ledger = _pipeline(tmp_path)

    outcome = asyncio.run(pipeline.run(_submission("Call.WAV")))

    assert isinstance(outcome, FullSuccess)
    assert outcome.record.client_name == "Acme"
    staged_path, content_type, staged_bytes = inference.uploads[0]
    assert staged_path.name.startswith("voiceline-")
    assert staged_path.suffix == ".wav"
    assert content_type == "audio/wav"
    assert staged_bytes == AUDIO
    assert len(ledger.calls) == 1
    assert not staged_path.exists()
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("filename, size", [("call.flac", 10), ("call.mp3", (25 << 20) + 1)])
def test_rejected_submission_makes_no_external_calls(tmp_path, filename, size):
    pipeline, inference, ledger = _pipeline(tmp_path)

    outcome = asyncio.run(pipeline.run(_submission(filename, size=size)))

    assert isinstance(outcome, HardFailure)
    assert outcome.stage == STAGE_VALIDATE
    assert inference.uploads == []
    assert ledger.calls == []
    assert list(tmp_path.iterdir()) == []


def test_analysis_failure_skips_ledger(tmp_path):
    pipeline, inference, ledger = _pipeline(
        tmp_path, inference=FakeInferenceBackend(text="no json here")
    )

    outcome = asyncio.run(pipeline.run(_submission()))

    assert isinstance(outcome, HardFailure)
    assert outcome.stage == STAGE_ANALYZE
    assert ledger.calls == []
    assert not inference.uploads[0][0].exists()


def test_persist_failure_keeps_the_analysis(tmp_path):
    pipeline, inference, _ = _pipeline(
        tmp_path, ledger=FakeLedgerBackend(error=RuntimeError("quota"))
    )

    outcome = asyncio.run(pipeline.run(_submission("call.mp3")))

    assert isinstance(outcome, AnalysisOnlyWithPersistError)
    assert outcome.record.summary == "Discussed renewal"
    assert outcome.record.urgency_score == 9
    assert isinstance(outcome.error, LedgerAppendError)
    assert not inference.uploads[0][0].exists()


def test_staging_failure_is_a_hard_failure(tmp_path):
    pipeline, inference, _ = _pipeline(tmp_path / "does-not-exist")

    outcome = asyncio.run(pipeline.run(_submission()))

    assert isinstance(outcome, HardFailure)
    assert outcome.stage == STAGE_STAGE
    assert isinstance(outcome.error, StagingError)
    assert inference.uploads == []


def test_staged_file_removed_when_body_raises(tmp_path):
    seen = []

    async def scenario():
        async with staged_upload(io.BytesIO(AUDIO), ".mp3", directory=str(tmp_path)) as path:
            seen.append(path)
            assert path.read_bytes() == AUDIO
            raise KeyError("boom")

    with pytest.raises(KeyError):
        asyncio.run(scenario())

    assert not seen[0].exists()


def test_staged_file_removed_on_cancellation(tmp_path):
    async def scenario():
        async def hold():
            async with staged_upload(io.BytesIO(AUDIO), ".webm", directory=str(tmp_path)):
                await asyncio.sleep(10)

        task = asyncio.ensure_future(hold())
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert list(tmp_path.iterdir()) == []


def test_unreadable_stream_is_a_staging_error(tmp_path):
    class BrokenStream(io.BytesIO):
        def read(self, *args):
            raise OSError("disk gone")

    async def scenario():
        async with staged_upload(BrokenStream(), ".wav", directory=str(tmp_path)):
            pass

    with pytest.raises(StagingError):
        asyncio.run(scenario())

    assert list(tmp_path.iterdir()) == []


def test_describe_lists_stages_in_order():
    names = [stage.name for stage in VoiceToCrmPipeline.describe()]
    assert names == ["Validation", "Staging", "Analysis", "Persistence"]


def test_submission_from_parsed_form_upload():
    upload = UploadFile(io.BytesIO(AUDIO), size=len(AUDIO), filename="call.wav")

    submission = submission_from_upload(upload)

    assert submission is not None
    assert submission.filename == "call.wav"
    assert submission.size == len(AUDIO)
    assert validate_submission(submission) == (".wav", "audio/wav")


def test_submission_size_is_measured_when_not_declared():
    upload = UploadFile(io.BytesIO(AUDIO), filename="call.mp3")

    assert submission_from_upload(upload).size == len(AUDIO)


@pytest.mark.parametrize("value", [None, "call.wav", b"bytes"])
def test_non_file_form_values_yield_no_submission(value):
    assert submission_from_upload(value) is None
