"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from ambient.config import get_settings

    settings = get_settings()
    print(settings.llm.openai_api_key)
    print(settings.database.url)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MissingConfigurationError(Exception):
    """A required setting (database URL, API key) is not configured."""

    def __init__(self, message: str, setting: str | None = None):
        self.message = message
        self.setting = setting
        super().__init__(message)


class LLMSettings(BaseSettings):
    """LLM provider configuration."""

    default_provider: Literal["openai", "anthropic"] = Field(
        default="openai", description="Default LLM provider"
    )
    evaluator_provider: Literal["openai", "anthropic"] | None = Field(
        None, description="Provider for SQL evaluation tasks (defaults to default_provider)"
    )

    # OpenAI configuration
    openai_api_key: str | None = Field(
        None,
        description="OpenAI API key",
        min_length=20,
        validation_alias=AliasChoices("LLM_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_model: str = Field(default="gpt-4o", description="OpenAI model for complex tasks")
    openai_model_mini: str = Field(default="gpt-4o-mini", description="OpenAI lightweight model")

    # Anthropic configuration
    anthropic_api_key: str | None = Field(
        None,
        description="Anthropic API key",
        min_length=20,
        validation_alias=AliasChoices("LLM_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    )
    anthropic_model: str = Field(
        default="claude-3-5-sonnet-20241022", description="Anthropic model for complex tasks"
    )
    anthropic_model_mini: str = Field(
        default="claude-3-5-haiku-20241022", description="Anthropic lightweight model"
    )

    timeout: int = Field(
        default=60,
        gt=0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("openai_api_key", "anthropic_api_key", mode="before")
    @classmethod
    def normalize_key(cls, v: str | None) -> str | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_key(cls, v: str | None) -> str | None:
        """Validate OpenAI API key format."""
        if v and not v.startswith("sk-"):
            raise ValueError("OpenAI API key must start with 'sk-'")
        return v

    @field_validator("anthropic_api_key")
    @classmethod
    def validate_anthropic_key(cls, v: str | None) -> str | None:
        """Validate Anthropic API key format."""
        if v and not v.startswith("sk-ant-"):
            raise ValueError("Anthropic API key must start with 'sk-ant-'")
        return v


class DatabaseSettings(BaseSettings):
    """Target database configuration."""

    url: str | None = Field(
        None,
        description="Default Postgres connection URL (the database being explored)",
        validation_alias=AliasChoices("DATABASE_URL", "DEMO_POSTGRES_DATABASE_URL"),
    )
    environments: dict[str, str] = Field(
        default_factory=dict,
        description="Environment identifier -> connection URL (JSON). Unknown ids use `url`.",
    )
    ssl: Literal["disable", "allow", "prefer", "require", "verify-ca", "verify-full"] = Field(
        default="prefer",
        description="asyncpg SSL mode",
    )
    connect_timeout: int = Field(
        default=30,
        gt=0,
        description="Connection timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, v: str | None) -> str | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Only Postgres URLs are supported."""
        if v is None:
            return v
        parsed = urlparse(v)
        scheme = parsed.scheme.split("+")[0].lower() if parsed.scheme else ""
        if scheme not in {"postgres", "postgresql"}:
            raise ValueError("DATABASE_URL must use the postgresql scheme.")
        if not parsed.hostname:
            raise ValueError("DATABASE_URL must include a host.")
        return v

    def url_for(self, env: str | None) -> str | None:
        """Return the connection URL for an environment identifier."""
        if env and env in self.environments:
            return self.environments[env]
        return self.url


class TracingSettings(BaseSettings):
    """LangSmith tracing configuration."""

    tracing: bool = Field(default=False, description="Tag LLM calls for LangSmith tracing")
    api_key: str | None = Field(None, description="LangSmith API key")
    endpoint: str = Field(
        default="https://api.smith.langchain.com",
        description="LangSmith API endpoint",
    )
    project: str = Field(default="ambient-analytics", description="LangSmith project name")

    model_config = SettingsConfigDict(
        env_prefix="LANGSMITH_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def enabled(self) -> bool:
        """Tracing needs both the flag and a key."""
        return self.tracing and bool(self.api_key)


class PipelineSettings(BaseSettings):
    """Orchestration thresholds and prompt sampling sizes."""

    refine_threshold: float = Field(
        default=0.9,
        ge=0.0,
        le=1.0,
        description="Evaluation score below which refinement is offered",
    )
    sample_rows_limit: int = Field(
        default=10, gt=0, le=1000, description="Rows returned by sample-data"
    )
    sql_sample_rows: int = Field(
        default=3, ge=0, le=50, description="Sample rows shown in the single-table SQL prompt"
    )
    interpretation_rows: int = Field(
        default=10, gt=0, le=100, description="Result rows shown to the interpreter"
    )
    evaluation_sample_rows: int = Field(
        default=3, ge=0, le=50, description="Result rows shown to the evaluator and refiner"
    )
    chart_sample_rows: int = Field(
        default=5, gt=0, le=100, description="Result rows shown to the chart generator"
    )
    max_questions: int = Field(
        default=10, gt=0, le=50, description="Maximum generated example questions"
    )

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stdout only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,
        )


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (llm, database, tracing, pipeline, logging).

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, staging, production)
        APP_NAME: Application name for logging
        DEBUG: Enable debug mode
        API_HOST / API_PORT: API server bind address
        CORS_ORIGINS: Comma-separated allowed origins
        LLM_*: LLM provider configuration (see LLMSettings)
        DATABASE_*: Target database configuration (see DatabaseSettings)
        LANGSMITH_*: Tracing configuration (see TracingSettings)
        PIPELINE_*: Orchestration thresholds (see PipelineSettings)
        LOG_*: Logging configuration (see LoggingSettings)

    Example:
        >>> settings = get_settings()
        >>> settings.llm.default_provider
        'openai'
        >>> settings.pipeline.refine_threshold
        0.9
    """

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(
        default="Ambient Analytics",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        gt=0,
        le=65535,
        description="API server port",
    )
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Comma-separated CORS origins",
    )

    llm: LLMSettings = Field(default_factory=LLMSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    tracing: TracingSettings = Field(default_factory=TracingSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        """CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def model_post_init(self, __context) -> None:
        """Configure logging and log the loaded configuration."""
        self.logging.configure()
        logger = logging.getLogger(__name__)
        logger.info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "environment": self.environment,
                "llm_provider": self.llm.default_provider,
                "database_configured": self.database.url is not None,
                "tracing_enabled": self.tracing.enabled,
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("AMBIENT_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
