"""
Configuration Management Module

Configures application parameters via environment variables or .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "OpenAI to NVIDIA NIM Proxy"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Backend Config
    NIM_API_BASE: str = "https://integrate.api.nvidia.com/v1"
    # Required, the server refuses to start without it
    NIM_API_KEY: Optional[str] = None
    # Backend request timeout (seconds)
    HTTP_TIMEOUT: int = 180

    # Request Limits
    # Maximum accepted request body size in bytes (100 MB)
    MAX_BODY_SIZE: int = 100 * 1024 * 1024

    # CORS Config
    # Comma-separated list of allowed origins, "*" allows any origin
    ALLOWED_ORIGINS: str = "*"

    # Reasoning display: merge reasoning_content into content wrapped in <think> markers
    SHOW_REASONING: bool = False
    # Always stream from the backend, regardless of the caller's "stream" flag
    FORCE_STREAMING: bool = True
    # Ask the backend chat template to enable thinking
    ENABLE_THINKING_MODE: bool = False

    # Maximum number of heuristic model resolutions remembered
    MODEL_CACHE_SIZE: int = 100
    # Keep-alive comment interval for event streams (seconds)
    HEARTBEAT_INTERVAL_SECONDS: float = 15.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
