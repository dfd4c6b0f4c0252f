"""
Configuration settings for simulado-cli.

Uses Pydantic Settings for environment variable management with .env file support.
Every setting can be overridden with a SIMULADO_ prefixed variable, e.g.
SIMULADO_AI_API_URL=http://exams.local/api/v1.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Placeholder learner used by the exam service until auth is wired end to end
DEFAULT_USER_ID = "507f1f77bcf86cd799439011"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SIMULADO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Remote services
    # ========================================
    api_url: str = Field(
        default="http://localhost:3001/api",
        description="Base URL for the users/auth API",
    )
    ai_api_url: str = Field(
        default="http://localhost:8000/api/v1",
        description="Base URL for the exam, topic and conversation APIs",
    )
    user_id: str = Field(
        default=DEFAULT_USER_ID,
        description="User id sent to the exam service",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout for every remote call",
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for idempotent reads before giving up",
    )
    use_mock_data: bool = Field(
        default=False,
        description="Skip the exam service and build placeholder simulados locally",
    )

    # ========================================
    # Local state
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".simulado",
        description="Directory holding the persisted state file",
    )
    state_file_name: str = "state.json"

    # ========================================
    # Simulado defaults
    # ========================================
    default_question_count: int = Field(default=25, ge=1, le=100)
    default_time_limit: int = Field(default=60, ge=15, le=300)

    # ========================================
    # Logging
    # ========================================
    log_level: str = "WARNING"

    @property
    def state_path(self) -> Path:
        return self.data_dir / self.state_file_name

    @property
    def exams_url(self) -> str:
        return f"{self.ai_api_url.rstrip('/')}/exams"

    @property
    def topics_url(self) -> str:
        return f"{self.ai_api_url.rstrip('/')}/question-topics"

    @property
    def conversation_url(self) -> str:
        return f"{self.ai_api_url.rstrip('/')}/conversation"

    @property
    def users_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/users"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
