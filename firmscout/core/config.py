"""
Configuration module with strict validation.

Key principles:
- APP STARTUP does NOT require GEMINI_API_KEY
- Generation calls DO require the key (the client fails at call time)
- Web search is optional and only enabled when both Google keys are set
- Safe defaults for all optional settings
"""
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


VALID_STRICTNESS = {"basic", "strict"}


class Settings(BaseSettings):
    """Application settings with validation.

    Loads from environment variables and .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database (REQUIRED for API startup)
    database_url: str = Field(
        ...,
        description="SQLAlchemy database URL (sqlite:///... or postgresql://...)"
    )

    # Gemini generation service (OPTIONAL for startup, REQUIRED for generation)
    gemini_api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key - required only for generation calls"
    )

    gemini_model: str = Field(
        default="gemini-1.5-flash",
        description="Model used for firm search, contact discovery and firm enrichment"
    )

    gemini_enrichment_model: str = Field(
        default="gemini-1.5-pro-latest",
        description="Model used for evidence-grounded contact enrichment"
    )

    # Google Programmable Search (OPTIONAL)
    google_api_key: Optional[str] = Field(
        default=None,
        description="Google Custom Search API key - enables search-assisted enrichment"
    )

    google_cse_id: Optional[str] = Field(
        default=None,
        description="Google Custom Search engine id (cx)"
    )

    # Generation behaviour
    generation_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts per generation call (including the first)"
    )

    firms_per_search: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Number of firms requested per investor search"
    )

    request_timeout_seconds: float = Field(
        default=60.0,
        ge=1.0,
        le=300.0,
        description="HTTP timeout for upstream calls"
    )

    validation_strictness: str = Field(
        default="strict",
        description="Result validation level: 'basic' or 'strict'"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator("validation_strictness")
    @classmethod
    def validate_strictness(cls, v: str) -> str:
        v_lower = v.strip().lower()
        if v_lower not in VALID_STRICTNESS:
            raise ValueError(f"validation_strictness must be one of {VALID_STRICTNESS}")
        return v_lower

    @property
    def search_enabled(self) -> bool:
        """True when both Google Custom Search credentials are configured."""
        return bool(self.google_api_key and self.google_cse_id)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    Lazy so that importing the app never requires a configured environment;
    tests call reset_settings() between cases.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance."""
    global _settings
    _settings = None
