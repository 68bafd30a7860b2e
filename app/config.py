"""Configuration management using pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Vision provider selection: "claude", "grok" or "gemini"
    ai_provider: str = "gemini"

    # Claude (Anthropic) Configuration
    claude_api_key: str = ""
    claude_model_planning: str = "claude-sonnet-4-20250514"
    claude_model_fast: str = "claude-3-5-haiku-20241022"

    # Grok (xAI) Configuration
    grok_api_key: str = ""
    grok_model_planning: str = "grok-4"
    grok_model_fast: str = "grok-4-fast"

    # Gemini (Google) Configuration
    gemini_api_key: str = ""
    gemini_model_planning: str = "gemini-1.5-pro"
    gemini_model_fast: str = "gemini-1.5-flash"

    # Upper bound on tokens generated per chart answer
    max_output_tokens: int = 2000

    # Application Configuration
    app_env: str = "development"
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: str = ""

    # Client Configuration (used by the conversation session transport)
    api_base_url: str = "http://localhost:8000"
    request_timeout_seconds: float = 120.0

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_production(self) -> bool:
        """Whether the app runs in production mode."""
        return self.app_env.lower() == "production"

    @property
    def cors_origin_list(self) -> List[str]:
        """Comma-separated CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
