"""
Application settings management.

Settings are loaded from environment variables with .env file support.
Interview policy knobs (question cap, duration, guardrail attempts, sweeper
interval, quota) are loaded from config/interview_config.yaml.
All configuration is validated using Pydantic.
"""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LLMProviderName = Literal["anthropic", "openai", "groq"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # ==========================================================================
    # Paths
    # ==========================================================================

    config_dir: Path = Field(
        default=Path("config"),
        description="Directory containing YAML configuration files",
    )
    database_path: Path = Field(
        default=Path("data/interview.db"), description="Path to SQLite database file"
    )

    # ==========================================================================
    # LLM Configuration
    # ==========================================================================
    #
    # One provider backs question generation, answer evaluation, voice
    # evaluation and report generation. Defaults per provider live in
    # interview_engine/llm/client.py.

    llm_provider: LLMProviderName = Field(
        default="anthropic", description="Content generator provider"
    )
    llm_model: Optional[str] = Field(
        default=None, description="Override the provider's default model"
    )
    llm_timeout: float = Field(
        default=30.0, gt=0, description="HTTP timeout per LLM call in seconds"
    )

    anthropic_api_key: Optional[str] = Field(
        default=None, description="Anthropic API key"
    )
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    groq_api_key: Optional[str] = Field(default=None, description="Groq API key")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================

    host: str = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    debug: bool = Field(default=False, description="Enable debug mode")


# ============================================================================
# Interview Configuration (from YAML)
# ============================================================================


class SessionConfig(BaseModel):
    """Limits applied to every new session."""

    max_questions: int = Field(
        default=10, ge=1, le=100, description="Answered questions before the cap"
    )
    max_duration_minutes: int = Field(
        default=60, ge=1, le=480, description="Wall-clock budget per session"
    )
    time_warning_minutes: int = Field(
        default=5, ge=0, le=60, description="Near-deadline warning threshold"
    )


class GuardrailConfig(BaseModel):
    """Generation guardrail loop configuration."""

    max_attempts: int = Field(
        default=3, ge=1, le=10, description="Generator attempts before correction"
    )


class SweeperConfig(BaseModel):
    """Background session sweeper configuration."""

    enabled: bool = Field(default=True)
    interval_seconds: float = Field(
        default=60.0, gt=0, description="Seconds between stale-session sweeps"
    )


class QuotaConfig(BaseModel):
    """Per-user usage allowance."""

    monthly_interview_limit: Optional[int] = Field(
        default=None, ge=1, description="Interviews per user per month (null = unlimited)"
    )


class InterviewConfig(BaseModel):
    """
    Complete interview configuration loaded from interview_config.yaml.
    """

    session: SessionConfig = Field(default_factory=SessionConfig)
    guardrail: GuardrailConfig = Field(default_factory=GuardrailConfig)
    sweeper: SweeperConfig = Field(default_factory=SweeperConfig)
    quota: QuotaConfig = Field(default_factory=QuotaConfig)
    prompt_version: str = Field(default="v1.0")

    @field_validator("session")
    @classmethod
    def warning_inside_duration(cls, v: SessionConfig) -> SessionConfig:
        """The warning threshold cannot exceed the session duration."""
        if v.time_warning_minutes >= v.max_duration_minutes:
            raise ValueError(
                "time_warning_minutes must be smaller than max_duration_minutes"
            )
        return v


def load_interview_config(config_path: Optional[Path] = None) -> InterviewConfig:
    """
    Load interview configuration from YAML file.

    Args:
        config_path: Path to interview_config.yaml. If None, looks next to the
            project root, then in the current working directory.

    Returns:
        InterviewConfig with validated settings (defaults if no file is found)

    Raises:
        ValueError: If config validation fails
    """
    if config_path is None:
        candidates = [
            Path(__file__).resolve().parent.parent.parent
            / "config"
            / "interview_config.yaml",
            Path.cwd() / "config" / "interview_config.yaml",
        ]
        config_path = next((p for p in candidates if p.exists()), None)
        if config_path is None:
            return InterviewConfig()

    config_path = Path(config_path).resolve()

    if not config_path.exists():
        return InterviewConfig()

    with open(str(config_path)) as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        return InterviewConfig()

    return InterviewConfig(**config_data)


# Global settings instance
settings = Settings()

# Global interview config instance
interview_config = load_interview_config()
