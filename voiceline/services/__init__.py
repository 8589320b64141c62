"""Service layer helpers for external integrations."""

from .analysis_client import (
    AnalysisError,
    AnalysisParseError,
    AnalysisTimeoutError,
    ArtifactUploadError,
    CallAnalysisClient,
    EmptyResponseError,
    GenerationError,
)
from .gemini import ArtifactReference, GeminiInferenceBackend
from .ledger_client import (
    LedgerAppendError,
    LedgerClient,
    LedgerRow,
    LedgerTimeoutError,
    PersistenceError,
)
from .response_contract import AnalysisRecord, ResponseParseError, parse_analysis
from .sheets import GoogleSheetsBackend, load_credentials

__all__ = [
    "AnalysisError",
    "AnalysisParseError",
    "AnalysisRecord",
    "AnalysisTimeoutError",
    "ArtifactReference",
    "ArtifactUploadError",
    "CallAnalysisClient",
    "EmptyResponseError",
    "GeminiInferenceBackend",
    "GenerationError",
    "GoogleSheetsBackend",
    "LedgerAppendError",
    "LedgerClient",
    "LedgerRow",
    "LedgerTimeoutError",
    "PersistenceError",
    "ResponseParseError",
    "load_credentials",
    "parse_analysis",
]
