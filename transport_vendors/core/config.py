"""Application settings (pydantic-settings): env vars and an optional .env file."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL, make_url

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Transport Vendor API"
    app_env: str = "development"
    app_port: int = Field(default=5000, alias="PORT")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")

    # Comma-separated list, e.g. "https://vendors.example.com,http://localhost:3000"
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        alias="ALLOWED_ORIGINS",
    )

    # Spreadsheet import
    max_upload_size_mb: int = Field(default=5, alias="MAX_UPLOAD_SIZE_MB")

    # Database. DATABASE_URL wins over the individual parts when set.
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    db_driver: str = Field(default="postgresql+psycopg", alias="DB_DRIVER")
    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_port: int = Field(default=5432, alias="DB_PORT")
    db_user: str = Field(default="postgres", alias="DB_USER")
    db_password: str = Field(default="", alias="DB_PASSWORD")
    db_name: str = Field(default="transport_vendor_db", alias="DB_NAME")
    db_ssl_mode: str = Field(
        default="disable", alias="DB_SSL_MODE",
    )  # "disable" | "require" | "verify-ca" | "verify-full"
    db_echo: bool = Field(default=False, alias="DB_ECHO")

    # Connection pool: excess requests queue for up to db_pool_timeout seconds
    db_pool_size: int = Field(default=10, alias="DB_POOL_SIZE")
    db_pool_timeout: int = Field(default=30, alias="DB_POOL_TIMEOUT")
    db_connect_timeout: int = Field(default=10, alias="DB_CONNECT_TIMEOUT")

    run_migrations_on_startup: bool = Field(default=True, alias="RUN_MIGRATIONS_ON_STARTUP")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_log_level(cls, value: object) -> str | None:
        if value is None or not str(value).strip():
            return None
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def sqlalchemy_url(self) -> URL:
        """SQLAlchemy URL for the vendor store."""
        if self.database_url:
            return make_url(self.database_url)
        return URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )

    @property
    def safe_database_url(self) -> str:
        """The store URL with the password masked, for log output."""
        return self.sqlalchemy_url.render_as_string(hide_password=True)

settings = Settings()
