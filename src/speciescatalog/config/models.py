"""Configuration models for the species catalog.

This module contains all configuration-related Pydantic models used throughout the application.
"""

from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    """Structlog-based logging configuration."""

    level: str = "INFO"
    json_logs: bool | None = None  # None = auto-detect based on environment
    include_caller: bool = False  # Include file:line info (useful for debugging)
    extra_fields: dict[str, str] = Field(default_factory=lambda: {"service": "speciescatalog"})

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level '{v}'.")
        return level


class SearchConfig(BaseModel):
    """External title search used to autofill species fields."""

    endpoint: str = "https://en.wikipedia.org/w/rest.php/v1/search/page"
    limit: int = Field(default=3, ge=1)
    timeout_seconds: float = Field(default=10.0, gt=0)
    user_agent: str = "speciescatalog/1.0 (species autofill search)"


class SpeciesCatalogConfig(BaseModel):
    """Configuration settings for the species catalog application."""

    site_name: str = "Species Catalog"

    # Sessions
    session_secret: str = ""
    session_lifetime_seconds: int = 14 * 24 * 3600

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)

    @field_validator("session_lifetime_seconds")
    @classmethod
    def validate_session_lifetime(cls, v: int) -> int:
        """Sessions must last at least one minute."""
        if v < 60:
            raise ValueError("session_lifetime_seconds must be at least 60")
        return v
