from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(
        default="Mongo Bootstrap", description="Application name"
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    env: str = Field(default="development", description="Environment")

    # Database connection
    mongodb_url: str = Field(
        default="mongodb://127.0.0.1:27017/bootstrap?directConnection=true",
        description="MongoDB connection URL (database name in the path)",
    )
    db_server_selection_timeout_ms: int = Field(
        default=5000,
        ge=1,
        description="How long the driver waits for a reachable server",
    )
    db_drop_on_close: bool = Field(
        default=False,
        description="Drop every collection when the connection is closed",
    )

    # Reference data
    supported_languages: list[str] = Field(
        default_factory=lambda: ["en", "fr", "es"],
        description="Languages a value record may be written in",
    )
    default_language: str = Field(
        default="en", description="Language used to backfill missing values"
    )

    # TTL settings (seconds)
    token_expire_seconds: int = Field(
        default=86400, ge=0, description="Lifetime of validation tokens"
    )
    user_expire_seconds: int = Field(
        default=86400,
        ge=0,
        description="Lifetime of users that never confirmed their email",
    )
    notification_expire_seconds: int = Field(
        default=30 * 86400, ge=0, description="Lifetime of notifications"
    )
    ttl_drop_retries: int = Field(
        default=2,
        ge=0,
        description="Retries for transient errors while dropping a TTL index",
    )
    ttl_drop_retry_delay_seconds: float = Field(
        default=0.5, ge=0, description="Base delay between TTL drop retries"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.env.lower() in ("development", "dev")

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.env.lower() in ("production", "prod")


# Global configuration instance
config = Config()
