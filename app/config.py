"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Farm Records API Configuration
    records_api_base_url: str = Field(
        default="https://records.example.com",
        description="Base URL for the farm-records service"
    )
    records_api_key: str = Field(
        default="",
        description="API key for authentication"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for API calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=4,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Group Formation Parameters
    grouping_proximity_threshold: float = Field(
        default=2000.0,
        description="Maximum distance in meters for two plots to be spatially linked"
    )
    grouping_planting_date_tolerance: int = Field(
        default=2,
        description="Maximum planting date difference in days from the date cluster anchor"
    )
    grouping_min_group_area: float = Field(
        default=15.0,
        description="Minimum total group area in hectares"
    )
    grouping_max_group_area: float = Field(
        default=50.0,
        description="Maximum total group area in hectares"
    )
    grouping_min_plots_per_group: int = Field(
        default=5,
        description="Minimum number of plots per group"
    )
    grouping_max_plots_per_group: int = Field(
        default=15,
        description="Maximum number of plots per group"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Rice Production Group Formation Service",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
