"""
Configuration Management for Voice Budget

Uses pydantic-settings for type-safe configuration from environment variables.

All external collaborators (record store, speech provider) are configured
here. Sub-settings are loaded lazily so the app can run with only part of
the configuration present - e.g. no ElevenLabs key means the simulated
speech channel is used, no Google Sheets credentials means the in-memory
record store is used.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Worksheet names within the spreadsheet
    income_sources_sheet_name: str = Field(
        default="IncomeSources",
        description="Name of the sheet for income sources"
    )
    categories_sheet_name: str = Field(
        default="Categories",
        description="Name of the sheet for expense categories"
    )
    incomes_sheet_name: str = Field(
        default="Incomes",
        description="Name of the sheet for income records"
    )
    expenses_sheet_name: str = Field(
        default="Expenses",
        description="Name of the sheet for expense records"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class ElevenLabsSettings(BaseSettings):
    """ElevenLabs speech-to-text / text-to-speech configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ELEVENLABS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        min_length=1,
        description="ElevenLabs API key"
    )
    base_url: str = Field(
        default="https://api.elevenlabs.io/v1",
        description="ElevenLabs API base URL"
    )
    voice_id: str = Field(
        default="pNInz6obpgDQGcFmaJgB",
        description="Voice used for spoken confirmations"
    )
    stt_model_id: str = Field(
        default="scribe_v1",
        description="Speech-to-text model"
    )
    tts_model_id: str = Field(
        default="eleven_multilingual_v2",
        description="Text-to-speech model"
    )
    language_code: str = Field(
        default="eng",
        description="Language hint for transcription"
    )
    output_format: str = Field(
        default="mp3_44100_128",
        description="Audio format of synthesized speech"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    # Presentation
    currency_symbol: str = Field(
        default="$",
        min_length=1,
        max_length=3,
        description="Currency symbol used in confirmation messages"
    )
    default_user_id: str = Field(
        default="demo-user",
        min_length=1,
        description="User id used by the local front end"
    )

    # Upload limits for recorded commands
    max_audio_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum uploaded recording size in MB"
    )

    @property
    def max_audio_size_bytes(self) -> int:
        """Get max recording size in bytes."""
        return self.max_audio_size_mb * 1024 * 1024

    @property
    def effective_log_level(self) -> str:
        """Log level to configure; debug mode forces DEBUG."""
        return "DEBUG" if self.debug_mode else self.log_level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are built on access to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def elevenlabs(self) -> ElevenLabsSettings:
        return ElevenLabsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.elevenlabs
        results["elevenlabs"] = True
    except Exception as e:
        results["elevenlabs"] = False
        results["elevenlabs_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
