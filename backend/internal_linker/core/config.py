"""Engine configuration loaded from environment variables.

All configuration is via environment variables (or a local .env file).
No hardcoded URLs or credentials.
"""

from functools import lru_cache

from pydantic import Field, PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Internal Linking Engine")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Database
    database_url: PostgresDsn = Field(
        ...,
        description="PostgreSQL connection string for the article store",
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size")
    db_max_overflow: int = Field(default=10, description="Max overflow connections")
    db_pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    db_slow_query_threshold_ms: int = Field(
        default=100, description="Threshold for slow query warnings (ms)"
    )
    db_connect_timeout: int = Field(
        default=60, description="Connection timeout in seconds"
    )
    db_command_timeout: int = Field(
        default=60, description="Command timeout in seconds"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format: json or text")

    # Internal linking
    linking_max_links: int = Field(
        default=5, description="Maximum anchors inserted into one body per pass"
    )
    linking_candidate_limit: int = Field(
        default=10, description="Maximum candidate articles fetched per rewrite"
    )
    linking_content_keyword_limit: int = Field(
        default=20, description="Number of top body keywords used for retrieval"
    )
    linking_min_keyword_length: int = Field(
        default=4, description="Shortest word considered a keyword"
    )
    linking_url_prefix: str = Field(
        default="/blog/", description="Path prefix for links to article slugs"
    )
    linking_css_class: str = Field(
        default="internal-link", description="CSS class set on inserted anchors"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached engine settings."""
    return Settings()
