"""Configuration management for the FulQrun qualification service."""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # Environment
    FULQRUN_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Qualification scoring
    QUALIFICATION_SCORE_WEIGHTING: Literal["equal", "weighted"] = Field(
        default="equal",
        description="Overall score aggregation: 'equal' mean or 'weighted' by pillar weight",
    )
    QUALIFICATION_ATTENTION_THRESHOLD: int = Field(
        default=50, ge=0, le=100, description="Pillar score below which a next action is emitted"
    )
    QUALIFICATION_RECALC_BATCH_SIZE: int = Field(
        default=200, description="Opportunities fetched per page when recalculating scores"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
