"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.03.00"

    # Database
    DATABASE_URL: str = "sqlite:///./flock.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute, 0 disables)
    RATE_LIMIT_API: int = 120

    # Session context is supplied by the upstream auth layer via headers.
    # When the headers are missing and this is on, the mock context below is used.
    DEV_BYPASS_AUTH: bool = False
    DEV_ORG_ID: str = "00000000-0000-0000-0000-000000000123"
    DEV_USER_ID: str = "00000000-0000-0000-0000-000000000456"
    DEV_ROLE: str = "admin"

    # CSV import/export
    IMPORT_PREVIEW_ROWS: int = 5
    IMPORT_MAX_BYTES: int = 5 * 1024 * 1024
    EXPORT_DATE_FORMAT: str = "%m/%d/%Y"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
