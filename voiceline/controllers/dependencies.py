"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from voiceline.pipelines.voice import VoiceToCrmPipeline


def get_pipeline(request: Request) -> VoiceToCrmPipeline:
    """Return the pipeline built at startup."""

    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pipeline is not initialised",
        )
    return pipeline


PipelineDep = Annotated[VoiceToCrmPipeline, Depends(get_pipeline)]


__all__ = ["get_pipeline", "PipelineDep"]
