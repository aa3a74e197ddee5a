"""
Configuration management for CommandStack.

Uses Pydantic Settings for type-safe environment variable loading.
Configured via .env file in project root.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SESSION_SECRET = "dev-session-secret-change-me"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via .env file or environment variables.
    """

    # Python & Application
    python_env: Literal["development", "production"] = Field(
        default="development",
        description="Application environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./data/commandstack.db",
        description="Database connection URL"
    )

    # API Configuration
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8080,
        description="API server port"
    )
    api_reload: bool = Field(
        default=True,
        description="Enable auto-reload in development"
    )
    cors_allow_origins: list[str] = Field(
        default=["http://localhost:5173"],
        description="Origins allowed to call the API with credentials"
    )

    # Timezone used for calendar events and naive client datetimes
    timezone: str = Field(
        default="Asia/Seoul",
        description="IANA timezone name for local times (e.g., Asia/Seoul)"
    )

    # Google OAuth Configuration
    google_oauth_client_id: str = Field(
        default="",
        description="Google OAuth 2.0 client ID"
    )
    google_oauth_client_secret: str = Field(
        default="",
        description="Google OAuth 2.0 client secret"
    )
    google_oauth_redirect_uri: str = Field(
        default="http://localhost:8080/api/auth/google/callback",
        description="OAuth redirect URI (must match Google Cloud Console)"
    )
    google_calendar_id: str = Field(
        default="primary",
        description="Calendar that tasks are synced to"
    )

    # Session handoff
    session_secret_key: str = Field(
        default=DEFAULT_SESSION_SECRET,
        description="Secret used to sign the session cookie"
    )
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Web client base URL (receives the one-time token in the URL fragment)"
    )
    deep_link_scheme: str = Field(
        default="commandstack",
        description="Custom URI scheme that wakes the desktop app"
    )
    one_time_token_ttl_seconds: int = Field(
        default=60,
        ge=1,
        description="Lifetime of a session handoff token"
    )
    token_refresh_margin_minutes: int = Field(
        default=5,
        ge=0,
        description="Refresh Google access tokens this long before they expire"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.python_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.python_env == "production"

    @property
    def uses_postgresql(self) -> bool:
        """Check if PostgreSQL is the configured database."""
        return "postgresql" in self.database_url.lower()

    @property
    def uses_google_oauth(self) -> bool:
        """Check if Google OAuth is configured."""
        return bool(self.google_oauth_client_id and self.google_oauth_client_secret)

    def validate_production_config(self) -> None:
        """
        Validate configuration for production environment.

        Raises:
            ValueError: If required production settings are missing or invalid
        """
        if not self.is_production:
            return

        errors = []

        if not self.uses_postgresql:
            errors.append(
                "Production requires PostgreSQL. "
                "Set DATABASE_URL to a PostgreSQL connection string."
            )

        if not self.uses_google_oauth:
            errors.append(
                "GOOGLE_OAUTH_CLIENT_ID and GOOGLE_OAUTH_CLIENT_SECRET are required in production."
            )

        if self.session_secret_key == DEFAULT_SESSION_SECRET:
            errors.append("SESSION_SECRET_KEY must be changed in production.")

        if errors:
            raise ValueError("Production configuration errors:\n- " + "\n- ".join(errors))


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure we only load settings once.
    Use this function throughout the application to access settings.

    Returns:
        Settings instance loaded from environment

    Example:
        >>> from commandstack.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.database_url)
    """
    return Settings()
