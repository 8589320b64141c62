"""Build the long-lived pipeline clients from settings."""

from __future__ import annotations

from voiceline.pipelines.voice import VoiceToCrmPipeline
from voiceline.services import (
    CallAnalysisClient,
    GeminiInferenceBackend,
    GoogleSheetsBackend,
    LedgerClient,
    load_credentials,
)

from .settings import Settings, settings as default_settings


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing at startup."""


def build_analysis_client(config: Settings = default_settings) -> CallAnalysisClient:
    gemini = config.gemini
    if gemini.api_key is None or not gemini.api_key.get_secret_value().strip():
        raise ConfigurationError("GEMINI_API_KEY is required")

    backend = GeminiInferenceBackend(
        api_key=gemini.api_key.get_secret_value().strip(),
        model=gemini.model,
    )
    return CallAnalysisClient(
        backend,
        timeout_seconds=gemini.timeout_seconds,
        cleanup_timeout_seconds=gemini.cleanup_timeout_seconds,
    )


def build_ledger_client(config: Settings = default_settings) -> LedgerClient:
    sheets = config.sheets
    spreadsheet_id = (sheets.spreadsheet_id or "").strip()
    if not spreadsheet_id:
        raise ConfigurationError("SPREADSHEET_ID is required")

    credentials = load_credentials((sheets.credentials_file or "").strip() or None)
    backend = GoogleSheetsBackend(credentials, http_timeout=sheets.timeout_seconds)
    return LedgerClient(
        backend,
        spreadsheet_id=spreadsheet_id,
        append_range=sheets.append_range,
        timeout_seconds=sheets.timeout_seconds,
    )


def build_pipeline(config: Settings = default_settings) -> VoiceToCrmPipeline:
    """Create the pipeline; missing credentials are fatal before serving."""

    return VoiceToCrmPipeline(
        analysis_client=build_analysis_client(config),
        ledger_client=build_ledger_client(config),
        max_upload_bytes=config.pipeline.max_upload_bytes,
        staging_dir=config.pipeline.staging_dir,
        staging_timeout_seconds=config.pipeline.staging_timeout_seconds,
    )


__all__ = [
    "ConfigurationError",
    "build_analysis_client",
    "build_ledger_client",
    "build_pipeline",
]
