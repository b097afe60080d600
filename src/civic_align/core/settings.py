"""Application settings and configuration.

This module defines all configuration options for the Civic Align service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Civic Align", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./civic_align.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Feed pagination
    feed_default_limit: int = Field(default=20, alias="FEED_DEFAULT_LIMIT")
    feed_max_limit: int = Field(default=100, alias="FEED_MAX_LIMIT")

    # Voter preference cardinality, enforced at write time
    min_selected_issues: int = Field(default=4, alias="MIN_SELECTED_ISSUES")
    max_selected_issues: int = Field(default=7, alias="MAX_SELECTED_ISSUES")
    max_dealbreakers: int = Field(default=3, alias="MAX_DEALBREAKERS")

    # Alignment scoring
    dealbreaker_spectrum_threshold: int = Field(
        default=80,
        alias="DEALBREAKER_SPECTRUM_THRESHOLD",
    )

    # Trending job weights and rolling window
    trending_window_days: int = Field(default=7, alias="TRENDING_WINDOW_DAYS")
    trending_view_weight: int = Field(default=1, alias="TRENDING_VIEW_WEIGHT")
    trending_endorsement_weight: int = Field(default=5, alias="TRENDING_ENDORSEMENT_WEIGHT")

    # Contest stage that closes nomination and fires the cutoff job
    cutoff_trigger_stage: str = Field(default="voting", alias="CUTOFF_TRIGGER_STAGE")

    # Ledger retry policy for transient store failures
    ledger_max_retries: int = Field(default=3, alias="LEDGER_MAX_RETRIES")
    ledger_retry_base_delay: float = Field(default=0.05, alias="LEDGER_RETRY_BASE_DELAY")

    # Outbox relay worker
    event_relay_enabled: bool = Field(default=True, alias="EVENT_RELAY_ENABLED")
    event_relay_interval_seconds: float = Field(
        default=1.0,
        alias="EVENT_RELAY_INTERVAL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def trending_weights(self) -> dict[str, int]:
        """Return trending weights as a convenience dictionary."""
        return {
            "views": self.trending_view_weight,
            "endorsements": self.trending_endorsement_weight,
        }


settings = Settings()
