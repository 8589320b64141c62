"""Voice-to-CRM pipeline package.

Modules are organised by the order in which `/voice-to-crm` executes:

1. `ingestion` – validate the multipart upload and resolve its content type.
2. `staging` – write the upload to a transient file for the Gemini upload.
3. `flow` – run analysis and persistence, returning a tagged outcome.

The FastAPI controller imports from here so contributors can jump straight
to the relevant stage.
"""

from .flow import PipelineStage, VoiceToCrmPipeline
from .ingestion import (
    ALLOWED_CONTENT_TYPES,
    MAX_AUDIO_BYTES,
    MULTIPART_FIELD,
    SubmissionValidationError,
    resolve_content_type,
    submission_from_upload,
    validate_submission,
)
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

__all__ = [
    "ALLOWED_CONTENT_TYPES",
    "AnalysisOnlyWithPersistError",
    "AudioSubmission",
    "FullSuccess",
    "HardFailure",
    "MAX_AUDIO_BYTES",
    "MULTIPART_FIELD",
    "PipelineOutcome",
    "PipelineStage",
    "STAGE_ANALYZE",
    "STAGE_PERSIST",
    "STAGE_STAGE",
    "STAGE_VALIDATE",
    "StagingError",
    "SubmissionValidationError",
    "VoiceToCrmPipeline",
    "resolve_content_type",
    "staged_upload",
    "submission_from_upload",
    "validate_submission",
]
