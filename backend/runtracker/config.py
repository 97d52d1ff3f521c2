"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === CORS ===
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # === Runner ===
    default_runner_mass_kg: float = Field(
        default=70.0,
        gt=0,
        description="Body mass used for calories when the profile has none"
    )

    # === Tracking ===
    tick_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Elapsed-time clock period"
    )
    rejection_log_size: int = Field(
        default=50,
        ge=1,
        description="How many rejected fixes to keep for diagnostics"
    )

    # === Save policy ===
    min_save_duration_seconds: int = Field(default=120, ge=0)
    min_save_path_points: int = Field(default=2, ge=0)

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
