"""Configuration management for Synthcrawl using Pydantic Settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Synthesis settings loaded from environment variables."""

    # Induction settings
    similarity_threshold: float = Field(
        default=0.5,
        description="Minimum Jaccard similarity for a text to match a known value",
    )
    max_iterations: int = Field(
        default=10,
        description="Hard bound on synthesis rounds",
    )
    max_workers: int = Field(
        default=1,
        description="Worker threads for per-page extraction (1 disables the pool)",
    )
    parser_features: str = Field(
        default="html.parser",
        description="BeautifulSoup tree builder used to parse pages",
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    environment: str = Field(
        default="development",
        description="Environment (development or production)",
    )

    model_config = SettingsConfigDict(
        env_prefix="SYNTHCRAWL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("similarity_threshold")
    @classmethod
    def validate_similarity_threshold(cls, v: float) -> float:
        """Threshold must be a usable Jaccard cut-off."""
        if not 0.0 < v <= 1.0:
            raise ValueError(f"Invalid similarity_threshold: {v}. Expected 0 < x <= 1")
        return v

    @field_validator("max_iterations", "max_workers")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Iteration bound and pool size must be at least 1."""
        if v < 1:
            raise ValueError(f"Value must be at least 1, got {v}")
        return v

    @field_validator("parser_features")
    @classmethod
    def validate_parser_features(cls, v: str) -> str:
        """Validate parser is one BeautifulSoup knows how to build."""
        allowed = {"html.parser", "lxml", "html5lib"}
        if v not in allowed:
            raise ValueError(
                f"Invalid parser_features: {v}. Allowed values: {', '.join(sorted(allowed))}"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Invalid log_level: {v}")
        return v.upper()


# Global settings instance
settings = Settings()
