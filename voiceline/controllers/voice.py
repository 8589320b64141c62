"""Voice-to-CRM endpoint.

For a stage-by-stage map see `voiceline.pipelines.voice.flow`. The POST
`/voice-to-crm` request performs:

1. Validation of the multipart ``file`` part (size cap and extension).
2. Staging of the upload to a transient file.
3. Gemini analysis of the staged audio.
4. Append of the derived row to the Google Sheet.

A failed sheet append still returns the analysis alongside the error.
"""

import asyncio
import contextlib
import logging
from typing import Any, Awaitable

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response

from voiceline.config.settings import settings
from voiceline.controllers.dependencies import PipelineDep
from voiceline.pipelines.voice import (
    MULTIPART_FIELD,
    STAGE_ANALYZE,
    STAGE_VALIDATE,
    AnalysisOnlyWithPersistError,
    FullSuccess,
    HardFailure,
    PipelineOutcome,
    VoiceToCrmPipeline,
    submission_from_upload,
)
from voiceline.views import AnalysisResponse, ErrorResponse, PersistFailureResponse

router = APIRouter(tags=["voice"])

logger = logging.getLogger(__name__)

PIPELINE_STAGES = tuple(VoiceToCrmPipeline.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""

CLIENT_CLOSED_REQUEST = 499


@router.post(
    "/voice-to-crm",
    response_model=AnalysisResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "model": PersistFailureResponse,
            "description": "Analysis or sheet append failed; `analysis` is present only for the latter.",
        },
    },
)
async def voice_to_crm(request: Request, pipeline: PipelineDep) -> Response:
    """Analyse an uploaded .wav, .mp3 or .webm sales call and log it to the sheet."""

    form = await request.form()
    try:
        submission = submission_from_upload(form.get(MULTIPART_FIELD))
        outcome = await _run_until_disconnected(
            request,
            pipeline.run(submission),
            settings.pipeline.disconnect_poll_seconds,
        )
    finally:
        await form.close()

    if outcome is None:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    return render_outcome(outcome)


async def _run_until_disconnected(
    request: Request,
    work: Awaitable[PipelineOutcome],
    poll_seconds: float,
) -> PipelineOutcome | None:
    """Await ``work`` but cancel it once the client goes away."""

    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_seconds)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning("Client disconnected; cancelling voice pipeline")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                return None
    except asyncio.CancelledError:
        task.cancel()
        raise


def render_outcome(outcome: PipelineOutcome) -> JSONResponse:
    """Map a pipeline outcome onto the HTTP contract."""

    if isinstance(outcome, FullSuccess):
        body: Any = AnalysisResponse.from_record(outcome.record)
        return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())

    if isinstance(outcome, AnalysisOnlyWithPersistError):
        body = PersistFailureResponse(
            error=f"failed to append to sheet: {outcome.error}",
            analysis=AnalysisResponse.from_record(outcome.record),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.model_dump(),
        )

    if isinstance(outcome, HardFailure):
        if outcome.stage == STAGE_VALIDATE:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=ErrorResponse(error=str(outcome.error)).model_dump(),
            )
        message = str(outcome.error)
        if outcome.stage == STAGE_ANALYZE:
            message = f"analysis failed: {outcome.error}"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=message).model_dump(),
        )

    raise TypeError(f"unknown pipeline outcome: {outcome!r}")


__all__ = ["router", "render_outcome", "PIPELINE_STAGES"]
