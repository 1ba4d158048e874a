"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Questlog"
    app_version: str = "4.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    # If database_url_override is set (e.g., a managed Postgres URL), it takes precedence
    database_url_override: str | None = None
    database_backend: Literal["sqlite", "postgres"] = "sqlite"
    sqlite_path: str = "questlog.db"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "questlog"
    postgres_password: str = ""
    postgres_db: str = "questlog"

    @computed_field
    @property
    def database_url(self) -> str:
        """Get async database URL. Uses override if provided, otherwise constructs from parts."""
        if self.database_url_override:
            url = self.database_url_override
            # Replace scheme for async driver
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            elif url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql+asyncpg://", 1)
            elif url.startswith("sqlite:///"):
                url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
            # asyncpg doesn't accept query params via URL
            if url.startswith("postgresql+asyncpg://") and "?" in url:
                url = url.split("?")[0]
            return url
        if self.database_backend == "sqlite":
            return f"sqlite+aiosqlite:///{self.sqlite_path}"
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    @computed_field
    @property
    def database_url_sync(self) -> str:
        """Get sync database URL (for Alembic). Uses override if provided, otherwise constructs from parts."""
        if self.database_url_override:
            url = self.database_url_override
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql://", 1)
            elif url.startswith("postgresql+asyncpg://"):
                url = url.replace("postgresql+asyncpg://", "postgresql://", 1)
            elif url.startswith("sqlite+aiosqlite:///"):
                url = url.replace("sqlite+aiosqlite:///", "sqlite:///", 1)
            return url
        if self.database_backend == "sqlite":
            return f"sqlite:///{self.sqlite_path}"
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    @computed_field
    @property
    def database_is_sqlite(self) -> bool:
        """Check whether the configured database is SQLite."""
        return self.database_url.startswith("sqlite")

    # Auth / JWT
    jwt_secret_key: str  # Required - no default, must be set in .env
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days
    password_hash_rounds: int = 12

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Cookies
    # Set to true when frontend and backend are on different domains
    # This uses samesite="none" + secure=True instead of samesite="lax"
    cookie_cross_domain: bool = False

    # Rate limiting (fixed window per client address)
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60

    # Key-value blob store
    kv_default_ttl_seconds: int | None = None
    kv_list_limit: int = 100

    # Study rules layered around the ledger
    max_pips_per_day: int = 3
    minute_milestones: list[int] = [60, 300, 600, 1500, 3000, 6000]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def sanitize_error(error: Exception, *, generic_message: str = "An internal error occurred.") -> str:
    """
    Return a user-safe error message.

    In development, returns the full exception string for debugging.
    In staging/production, returns a generic message to avoid leaking internals.
    """
    settings = get_settings()
    if settings.environment == "development":
        return str(error)
    return generic_message
