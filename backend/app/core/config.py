"""
Exam Practice Coach - Core Configuration
Pydantic Settings for application configuration with environment variable support
"""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    APP_NAME: str = "Exam Practice Coach"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    LOG_LEVEL: str = "INFO"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # LLM Configuration
    LLM_PROVIDER: Literal["openai", "anthropic"] = "openai"
    LLM_TRANSPORT: Literal["sdk", "rest"] = "sdk"
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""

    # OpenAI specific
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"

    # Anthropic specific
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-latest"
    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com"

    # LLM Performance
    LLM_TEMPERATURE: float = 0.6
    LLM_MAX_OUTPUT_TOKENS: int = 2048
    LLM_TIMEOUT_SECONDS: int = 30
    LLM_MAX_RETRIES: int = 2
    LLM_RETRY_BACKOFF_SECONDS: float = 0.5

    # Practice pipeline
    # "auto" uses the model when a credential is configured, the local fallback otherwise
    GENERATION_MODE: Literal["auto", "llm", "stub"] = "auto"
    EVALUATION_MODE: Literal["auto", "llm", "heuristic"] = "auto"
    SCORE_OUT_OF_RANGE_POLICY: Literal["reject", "clamp"] = "reject"
    BATCH_EVALUATION_MODE: Literal["concurrent", "sequential"] = "concurrent"
    BATCH_MAX_CONCURRENCY: int = 4
    SESSION_STORE_MAX_SESSIONS: int = 500

    # Telemetry
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = "exam-practice-backend"
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ""

    # CORS - stored as comma-separated string
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173"

    @property
    def CORS_ORIGINS(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS_STR.split(",") if origin.strip()]

    @property
    def LLM_API_KEY(self) -> str:
        """API key for the configured provider."""
        if self.LLM_PROVIDER == "openai":
            return self.OPENAI_API_KEY
        return self.ANTHROPIC_API_KEY

    @property
    def LLM_MODEL(self) -> str:
        """Model name for the configured provider."""
        if self.LLM_PROVIDER == "openai":
            return self.OPENAI_MODEL
        return self.ANTHROPIC_MODEL


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
