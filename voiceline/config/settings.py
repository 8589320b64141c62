from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiConfig(BaseSettings):
    """Gemini inference backend configuration."""

    api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias="GEMINI_API_KEY",
    )
    model: str = Field(
        default="gemini-2.5-flash",
        validation_alias="GEMINI_MODEL",
    )
    timeout_seconds: float = Field(
        default=60.0,
        validation_alias="GEMINI_TIMEOUT_SECONDS",
        gt=0,
    )
    cleanup_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="GEMINI_CLEANUP_TIMEOUT_SECONDS",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class SheetsConfig(BaseSettings):
    """Google Sheets ledger configuration."""

    spreadsheet_id: Optional[str] = Field(
        default=None,
        validation_alias="SPREADSHEET_ID",
    )
    credentials_file: Optional[str] = Field(
        default=None,
        validation_alias="GOOGLE_APPLICATION_CREDENTIALS",
        description="Service account JSON; application default credentials when unset.",
    )
    append_range: str = Field(
        default="Sheet1!A:F",
        validation_alias="SHEETS_APPEND_RANGE",
    )
    timeout_seconds: float = Field(
        default=15.0,
        validation_alias="SHEETS_TIMEOUT_SECONDS",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class PipelineConfig(BaseSettings):
    """Limits applied to one voice-to-CRM request."""

    max_upload_bytes: int = Field(default=25 << 20, ge=1)
    staging_dir: Optional[str] = Field(
        default=None,
        description="Directory for staged uploads; the system temp dir when unset.",
    )
    staging_timeout_seconds: float = Field(default=30.0, gt=0)
    disconnect_poll_seconds: float = Field(default=0.5, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "VoiceLine"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/voice_pipeline.log"

    # Gemini
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)

    # Sheets
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)

    # Pipeline
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["POST", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
