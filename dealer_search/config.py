"""
Configuration management for the Dealer Search service.
Loads environment variables and provides typed configuration objects.
"""

from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when a required setting (usually an API key) is missing."""
    pass


class Settings(BaseSettings):
    """Main application settings loaded from environment variables with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )

    # API Keys - text generation & places search
    anthropic_api_key: str = Field(default="", description="Anthropic API key for Claude")
    google_places_api_key: str = Field(default="", description="Google Places API key for dealer lookup")

    # Text generation
    anthropic_model: str = Field(default="claude-sonnet-4-5", description="Claude model used for extraction and chat")
    max_tokens_generation: int = Field(default=1000, description="Max tokens for assistant replies")
    max_tokens_extraction: int = Field(default=600, description="Max tokens for filter extraction")

    # Inventory feed
    inventory_adapter: Literal["dealer", "mock"] = Field(default="dealer", description="Inventory adapter to use")
    inventory_timeout_seconds: float = Field(default=30.0, description="Timeout for one inventory widget request")

    # Places search
    places_api_url: str = Field(
        default="https://maps.googleapis.com/maps/api/place/nearbysearch/json",
        description="Places Nearby Search endpoint"
    )
    places_timeout_seconds: float = Field(default=8.0, description="Timeout for places search calls")

    # Search tuning
    search_result_cap: int = Field(default=50, description="Max cars returned by the filter search")
    description_max_per_model: int = Field(default=3, description="Per-model cap for description search")
    description_limit: int = Field(default=10, description="Result limit for description search")
    chat_context_limit: int = Field(default=12, description="Max visible cars sent to the assistant")

    # Application Settings
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


# Global settings instance
settings = Settings()


def require_anthropic_key() -> str:
    """Return the Anthropic API key or raise ConfigurationError."""
    if not settings.anthropic_api_key:
        raise ConfigurationError("Anthropic API key not configured")
    return settings.anthropic_api_key


def require_places_key() -> str:
    """Return the places API key or raise ConfigurationError."""
    if not settings.google_places_api_key:
        raise ConfigurationError("Missing GOOGLE_PLACES_API_KEY")
    return settings.google_places_api_key
