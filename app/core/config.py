"""Application configuration from environment variables."""

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # App
    app_name: str = "ImpactHub API"
    debug: bool = False
    environment: str = "development"
    log_level: str | None = None  # defaults to DEBUG when debug, else INFO

    # API
    api_v1_prefix: str = "/api/v1"

    # Database (PostgreSQL)
    database_host: str = "localhost"
    database_port: int = 5432
    database_user: str = "postgres"
    database_password: str = ""  # Set in .env - never commit
    database_name: str = "impacthub"
    database_ssl_mode: str = "disable"
    # Full async URL override, e.g. sqlite+aiosqlite:// for local tests
    database_url_override: str | None = Field(default=None, validation_alias="DATABASE_URL")

    # Pool (production tuning)
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # CORS: comma-separated list of allowed origins in production
    cors_origins: str = ""
    # Public frontend URL: allowed origin and base for password reset links
    site_url: str = "http://localhost:3000"

    # Auth
    secret_key: str = "dev-secret-change-me"  # Set in .env for any shared deployment
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    password_reset_expire_minutes: int = 60

    # Audit
    audit_log_to_db: bool = True

    def _build_db_url(self, scheme: str = "postgresql", ssl_query: str = "sslmode=require") -> str:
        user = quote_plus(self.database_user)
        password = quote_plus(self.database_password)
        return (
            f"{scheme}://{user}:{password}@{self.database_host}:{self.database_port}"
            f"/{self.database_name}?{ssl_query}"
        )

    @property
    def database_url(self) -> str:
        """Synchronous URL for Alembic and tooling."""
        if self.database_url_override:
            return self.database_url_override.replace("+asyncpg", "").replace("+aiosqlite", "")
        return self._build_db_url(scheme="postgresql", ssl_query=f"sslmode={self.database_ssl_mode}")

    @property
    def async_database_url(self) -> str:
        """Async URL for FastAPI (asyncpg driver)."""
        if self.database_url_override:
            return self.database_url_override
        ssl = "require" if self.database_ssl_mode in ("require", "verify-ca", "verify-full") else "disable"
        return self._build_db_url(scheme="postgresql+asyncpg", ssl_query=f"ssl={ssl}")

    @property
    def is_sqlite(self) -> bool:
        return self.async_database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
