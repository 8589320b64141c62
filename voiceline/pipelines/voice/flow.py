"""Orchestration of the voice-to-CRM pipeline.

Execution order for one ``POST /voice-to-crm`` request:

1. ``ingestion`` – require the ``file`` part, enforce the size cap and the
   allowed extensions. Nothing is written or sent before this passes.
2. ``staging`` – copy the upload to a unique transient file and fsync it.
3. ``analyze`` – upload the staged file to Gemini and normalize the answer.
4. ``persist`` – append the derived row to the Google Sheet.

A persistence failure does not discard the analysis: the caller receives
``AnalysisOnlyWithPersistError`` carrying both the record and the error.
The staged file is removed when the request ends, whichever stage it
reached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Protocol

from voiceline.services.analysis_client import AnalysisError
from voiceline.services.ledger_client import LedgerRow, PersistenceError
from voiceline.services.response_contract import AnalysisRecord
from voiceline.telemetry import observe_pipeline_outcome

from .ingestion import MAX_AUDIO_BYTES, SubmissionValidationError, validate_submission
from .staging import StagingError, staged_upload
from .types import (
    STAGE_ANALYZE,
    STAGE_PERSIST,
    STAGE_STAGE,
    STAGE_VALIDATE,
    AnalysisOnlyWithPersistError,
    AudioSubmission,
    FullSuccess,
    HardFailure,
    PipelineOutcome,
)

logger = logging.getLogger("voiceline.pipelines.voice")


def _failed_stage(outcome: PipelineOutcome) -> str:
    if isinstance(outcome, HardFailure):
        return outcome.stage
    if isinstance(outcome, AnalysisOnlyWithPersistError):
        return STAGE_PERSIST
    return "none"


class AnalysisClient(Protocol):
    async def analyze(self, audio_path, mime_type: str) -> AnalysisRecord:
        ...


class LedgerClient(Protocol):
    async def append_row(self, record: AnalysisRecord) -> LedgerRow:
        ...


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the voice pipeline."""

    order: int
    name: str
    module: str
    summary: str


class VoiceToCrmPipeline:
    """Turn one audio submission into an analysis record and a ledger row."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Validation",
            "voiceline.pipelines.voice.ingestion",
            "Require the 'file' part, the 25 MiB cap, and a .wav/.mp3/.webm name.",
        ),
        PipelineStage(
            2,
            "Staging",
            "voiceline.pipelines.voice.staging",
            "Write the upload to a unique temp file and fsync it.",
        ),
        PipelineStage(
            3,
            "Analysis",
            "voiceline.services.analysis_client",
            "Upload to Gemini, prompt against the artifact, normalize the JSON.",
        ),
        PipelineStage(
            4,
            "Persistence",
            "voiceline.services.ledger_client",
            "Append the derived row to the configured Google Sheet.",
        ),
    ]

    def __init__(
        self,
        *,
        analysis_client: AnalysisClient,
        ledger_client: LedgerClient,
        max_upload_bytes: int = MAX_AUDIO_BYTES,
        staging_dir: str | None = None,
        staging_timeout_seconds: float = 30.0,
    ) -> None:
        self._analysis_client = analysis_client
        self._ledger_client = ledger_client
        self._max_upload_bytes = max_upload_bytes
        self._staging_dir = staging_dir
        self._staging_timeout = staging_timeout_seconds

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)

    async def run(self, submission: AudioSubmission | None) -> PipelineOutcome:
        outcome = await self._run(submission)
        observe_pipeline_outcome(outcome.kind, _failed_stage(outcome))
        return outcome

    async def _run(self, submission: AudioSubmission | None) -> PipelineOutcome:
        try:
            extension, content_type = validate_submission(
                submission, self._max_upload_bytes
            )
        except SubmissionValidationError as exc:
            logger.info("Submission rejected: %s", exc)
            return HardFailure(error=exc, stage=STAGE_VALIDATE)

        logger.info(
            "Submission accepted filename=%s size=%s content_type=%s",
            submission.filename,
            submission.size,
            content_type,
        )

        try:
            async with staged_upload(
                submission.stream,
                extension,
                directory=self._staging_dir,
                timeout_seconds=self._staging_timeout,
            ) as audio_path:
                return await self._analyze_and_persist(audio_path, content_type)
        except StagingError as exc:
            logger.error("Staging failed: %s", exc)
            return HardFailure(error=exc, stage=STAGE_STAGE)

    async def _analyze_and_persist(self, audio_path, content_type: str) -> PipelineOutcome:
        try:
            record = await self._analysis_client.analyze(audio_path, content_type)
        except AnalysisError as exc:
            logger.error("Gemini analysis failed stage=%s: %s", exc.stage, exc)
            return HardFailure(error=exc, stage=STAGE_ANALYZE)

        logger.info(
            "Analysis ready client=%s sentiment=%s urgency=%s",
            record.client_name,
            record.sentiment,
            record.urgency_score,
        )

        try:
            await self._ledger_client.append_row(record)
        except PersistenceError as exc:
            logger.error("Sheets append failed: %s", exc)
            return AnalysisOnlyWithPersistError(record=record, error=exc)

        return FullSuccess(record=record)


__all__ = ["PipelineStage", "VoiceToCrmPipeline"]
