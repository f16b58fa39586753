"""Configuration settings for Star History DB."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SamplingConfig(BaseModel):
    """Configuration for star-history sampling.

    Controls the per-repository request budget and the dense early-star
    sampling policy. The dense constants are empirically tuned.
    """

    max_request_amount: int = Field(
        default=60,
        ge=1,
        le=1000,
        description="Maximum stargazer pages to request per repository",
    )
    per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Stargazers per page (GitHub maximum is 100)",
    )

    # Dense early sampling
    early_pages: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Leading pages always fetched in sampled mode",
    )
    dense_early_limit: int = Field(
        default=100,
        ge=1,
        description="Star position up to which the fine step applies",
    )
    dense_early_step: int = Field(
        default=5,
        ge=1,
        description="Emit a point every N stars up to dense_early_limit",
    )
    dense_late_step: int = Field(
        default=10,
        ge=1,
        description="Emit a point every N stars beyond dense_early_limit (early pages only)",
    )


class GovernorConfig(BaseModel):
    """Configuration for rate limit governance and retries."""

    # Budget model
    max_api_calls_per_hour: int = Field(
        default=4000,
        ge=1,
        description="Calls per hour to plan for (GitHub allows 5000 for a PAT)",
    )
    estimated_calls_per_repo: int = Field(
        default=40,
        ge=1,
        description="Estimated API calls consumed per repository",
    )
    min_remaining_calls: int = Field(
        default=100,
        ge=0,
        description="Wait for reset before a batch if fewer calls remain",
    )

    # Waits
    reset_safety_margin_seconds: float = Field(
        default=10.0,
        ge=0.0,
        description="Extra seconds added to a wait-for-reset",
    )
    short_wait_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Wait after a 403 while quota remains (abuse detection)",
    )
    release_connection_after_seconds: float = Field(
        default=300.0,
        ge=0.0,
        description="Release the database connection for waits longer than this",
    )

    # Retries
    max_retries: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum attempts per call when GitHub answers 403",
    )
    transport_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Extra attempts for network errors and 5xx responses",
    )
    transport_backoff_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Base backoff for transport retries (doubles each attempt)",
    )


class SchedulerConfig(BaseModel):
    """Configuration for the batch scheduler."""

    inter_call_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=60.0,
        description="Pause between repositories",
    )
    start_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=60.0,
        description="Pause before the first repository of a run",
    )
    checkpoint_dir: str = Field(
        default=".",
        description="Directory holding remaining/completed/failed repo logs",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class AllowlistConfig(BaseModel):
    """Credentials and endpoints for database IP allowlist management."""

    enabled: bool = Field(
        default=False,
        description="Add this host's public IP to the access list for the run",
    )
    public_key: str = Field(default="", description="Admin API public key")
    private_key: str = Field(default="", description="Admin API private key")
    project_id: str = Field(default="", description="Project (group) id")
    api_base_url: str = Field(
        default="https://cloud.mongodb.com/api/atlas/v1.0",
        description="Admin API base URL",
    )
    ip_lookup_url: str = Field(
        default="https://ipinfo.io/ip",
        description="Service returning the caller's public IP as plain text",
    )
    propagation_delay_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Pause after adding an IP so the rule can propagate",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Database
    # --------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite+aiosqlite:///./star_history.db",
        description="Async database connection string",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Scraping
    # --------------------------------------------------------------------------
    sampling: SamplingConfig = Field(
        default_factory=SamplingConfig,
        description="Star-history sampling configuration",
    )
    governor: GovernorConfig = Field(
        default_factory=GovernorConfig,
        description="Rate limit governance configuration",
    )
    scheduler: SchedulerConfig = Field(
        default_factory=SchedulerConfig,
        description="Batch scheduler configuration",
    )

    # --------------------------------------------------------------------------
    # Infrastructure
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )
    allowlist: AllowlistConfig = Field(
        default_factory=AllowlistConfig,
        description="Database IP allowlist management",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
