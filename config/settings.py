"""
Configuration module for the AI Schoolmate backend.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./schoolmate.db"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"
    openai_tool_model: str = "gpt-3.5-turbo-0125"
    openai_advice_model: str = "gpt-4"
    synthesis_temperature: float = 0.7
    synthesis_max_tokens: int = 500
    llm_timeout_seconds: float = 30.0
    llm_max_retries: int = 2

    # Agent
    tool_timeout_seconds: float = 20.0
    tool_max_workers: int = 4
    subject_mismatch_policy: str = "override"  # "override" or "report"
    agent_source_tag: str = "AI Schoolmate Agent"

    # Auth
    auth_secret_key: str = ""

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


settings = get_settings()
