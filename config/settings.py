"""
Configuration settings for the Arnela booking client.
Loads from environment variables with validation.
"""

from typing import Literal, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    log_level: str = Field(default="INFO", description="Root logging level")

    # Backend API Configuration
    api_base_url: str = Field(
        default="http://localhost:8080/api/v1",
        description="Arnela backend base URL"
    )
    api_token: Optional[str] = Field(default=None, description="Bearer token for the backend")
    request_timeout_seconds: float = 30.0
    api_max_attempts: int = Field(default=3, description="Attempts per request, including the first")
    api_retry_backoff_seconds: float = Field(
        default=0.5,
        description="Base delay for exponential backoff between attempts"
    )

    # Client Search Configuration
    search_debounce_ms: int = 300
    search_min_chars: int = 2

    # Booking Configuration
    booking_horizon_months: int = 6
    booking_weekdays: list[int] = [0, 1, 2, 3, 4]  # Mon-Fri (0=Monday)
    default_duration_minutes: Literal[45, 60] = 60
    default_room: str = "gabinete_01"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "ARNELA_"
        case_sensitive = False


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
