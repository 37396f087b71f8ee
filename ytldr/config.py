"""
Configuration for the ytldr summarization core.

Provides environment-based configuration with Pydantic settings. Every field
can be set either with a flat variable (``GEMINI_API_KEY``) or with the nested
form (``GEMINI__API_KEY``).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class _GroupSettings(BaseSettings):
    """Base for setting groups; each group reads its own variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class GeminiSettings(_GroupSettings):
    """Google Gemini provider settings."""

    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("GEMINI_API_KEY", "GEMINI__API_KEY"),
    )
    api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias=AliasChoices("GEMINI_API_BASE", "GEMINI__API_BASE"),
    )
    model: str = Field(
        default="gemini-1.5-flash-latest",
        validation_alias=AliasChoices("GEMINI_MODEL", "GEMINI__MODEL"),
    )
    timeout: float = Field(
        default=60.0,
        validation_alias=AliasChoices("GEMINI_TIMEOUT", "GEMINI__TIMEOUT"),
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        validation_alias=AliasChoices("GEMINI_TEMPERATURE", "GEMINI__TEMPERATURE"),
    )
    max_output_tokens: int = Field(
        default=2048,
        ge=1,
        validation_alias=AliasChoices(
            "GEMINI_MAX_OUTPUT_TOKENS", "GEMINI__MAX_OUTPUT_TOKENS"
        ),
    )

    def is_configured(self) -> bool:
        """Check if an API key is present."""
        return bool(self.api_key.get_secret_value())


class HuggingFaceSettings(_GroupSettings):
    """Hugging Face Inference provider settings."""

    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "HUGGINGFACE_API_KEY", "HF_TOKEN", "HUGGINGFACE__API_KEY"
        ),
    )
    api_base: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("HUGGINGFACE_API_BASE", "HUGGINGFACE__API_BASE"),
        description="TGI endpoint URL; when unset the hosted model id is used",
    )
    model: str = Field(
        default="mistralai/Mistral-7B-Instruct-v0.3",
        validation_alias=AliasChoices("HUGGINGFACE_MODEL", "HUGGINGFACE__MODEL"),
    )
    task: str = Field(
        default="text-generation",
        validation_alias=AliasChoices("HUGGINGFACE_TASK", "HUGGINGFACE__TASK"),
        description="Inference task: 'summarization' or 'text-generation'",
    )
    timeout: float = Field(
        default=60.0,
        validation_alias=AliasChoices("HUGGINGFACE_TIMEOUT", "HUGGINGFACE__TIMEOUT"),
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        validation_alias=AliasChoices(
            "HUGGINGFACE_TEMPERATURE", "HUGGINGFACE__TEMPERATURE"
        ),
    )
    max_output_tokens: int = Field(
        default=500,
        ge=1,
        validation_alias=AliasChoices(
            "HUGGINGFACE_MAX_OUTPUT_TOKENS", "HUGGINGFACE__MAX_OUTPUT_TOKENS"
        ),
    )
    max_concurrency: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices(
            "HUGGINGFACE_MAX_CONCURRENCY", "HUGGINGFACE__MAX_CONCURRENCY"
        ),
    )

    @field_validator("task")
    @classmethod
    def validate_task(cls, v: str) -> str:
        task = (v or "").strip().lower()
        if task not in ("summarization", "text-generation"):
            raise ValueError("task must be 'summarization' or 'text-generation'")
        return task


class SummarizationSettings(_GroupSettings):
    """Chunking and orchestration settings."""

    providers: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["gemini", "huggingface"],
        validation_alias=AliasChoices("SUMMARY_PROVIDERS", "SUMMARIZATION__PROVIDERS"),
    )
    sticky_provider: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "SUMMARY_STICKY_PROVIDER", "SUMMARIZATION__STICKY_PROVIDER"
        ),
    )
    max_chunk_size: int = Field(
        default=30000,
        gt=0,
        validation_alias=AliasChoices(
            "SUMMARY_MAX_CHUNK_SIZE", "SUMMARIZATION__MAX_CHUNK_SIZE"
        ),
    )
    overlap_size: int = Field(
        default=1000,
        ge=0,
        validation_alias=AliasChoices(
            "SUMMARY_OVERLAP_SIZE", "SUMMARIZATION__OVERLAP_SIZE"
        ),
    )
    boundary_ratio: float = Field(
        default=0.7,
        ge=0.0,
        lt=1.0,
        validation_alias=AliasChoices(
            "SUMMARY_BOUNDARY_RATIO", "SUMMARIZATION__BOUNDARY_RATIO"
        ),
    )
    max_concurrency: int = Field(
        default=1,
        ge=1,
        validation_alias=AliasChoices(
            "SUMMARY_MAX_CONCURRENCY", "SUMMARIZATION__MAX_CONCURRENCY"
        ),
    )
    min_content_length: int = Field(
        default=10,
        ge=1,
        validation_alias=AliasChoices(
            "SUMMARY_MIN_CONTENT_LENGTH", "SUMMARIZATION__MIN_CONTENT_LENGTH"
        ),
    )
    forensic_temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        validation_alias=AliasChoices(
            "FORENSIC_TEMPERATURE", "SUMMARIZATION__FORENSIC_TEMPERATURE"
        ),
    )
    forensic_max_output_tokens: int = Field(
        default=2048,
        ge=1,
        validation_alias=AliasChoices(
            "FORENSIC_MAX_OUTPUT_TOKENS", "SUMMARIZATION__FORENSIC_MAX_OUTPUT_TOKENS"
        ),
    )

    @field_validator("providers", mode="before")
    @classmethod
    def parse_providers(cls, v):
        if isinstance(v, str):
            return [p.strip().lower() for p in v.split(",") if p.strip()]
        return v or ["gemini"]


class ExtractionSettings(_GroupSettings):
    """Settings for fetching and extracting article text."""

    fetch_timeout: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "EXTRACTION_FETCH_TIMEOUT", "EXTRACTION__FETCH_TIMEOUT"
        ),
    )
    max_content_length: int = Field(
        default=500_000,
        gt=0,
        validation_alias=AliasChoices(
            "EXTRACTION_MAX_CONTENT_LENGTH", "EXTRACTION__MAX_CONTENT_LENGTH"
        ),
    )
    user_agent: str = Field(
        default="ytldr-summarizer/0.3",
        validation_alias=AliasChoices("EXTRACTION_USER_AGENT", "EXTRACTION__USER_AGENT"),
    )


class Settings(BaseSettings):
    """Top-level configuration for the summarization core."""

    service_name: str = Field(
        default="ytldr",
        validation_alias=AliasChoices("SERVICE_NAME"),
    )
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "ENV"),
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("HOST"),
    )
    port: int = Field(
        default=8080,
        validation_alias=AliasChoices("PORT"),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL"),
    )
    log_format: str = Field(
        default="json",
        validation_alias=AliasChoices("LOG_FORMAT"),
        description="Log format: 'json' or 'text'",
    )

    # Nested settings
    summarization: SummarizationSettings = Field(default_factory=SummarizationSettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    huggingface: HuggingFaceSettings = Field(default_factory=HuggingFaceSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure logging based on settings.

    Args:
        settings: Optional settings instance, uses cached settings if not provided
    """
    import json
    import logging
    import sys

    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if settings.log_format == "json":
        # Attributes present on every LogRecord; anything else came from extra=
        reserved = set(
            logging.LogRecord("", 0, "", 0, "", None, None).__dict__
        ) | {"message", "asctime"}

        class JSONFormatter(logging.Formatter):
            def format(self, record):
                log_record = {
                    "timestamp": self.formatTime(record),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                    "service": settings.service_name,
                }
                for key, value in record.__dict__.items():
                    if key not in reserved and not key.startswith("_"):
                        log_record[key] = value
                if record.exc_info:
                    log_record["exception"] = self.formatException(record.exc_info)
                return json.dumps(log_record, default=str)

        handler.setFormatter(JSONFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)

    root_logger.addHandler(handler)

    # Third-party HTTP clients are noisy at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
