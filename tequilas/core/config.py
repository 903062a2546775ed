"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Local SQLite/PostgreSQL, default secrets accepted
    - STAGING: Pre-production, insecure defaults are reported at startup
    - PRODUCTION: Live deployment, insecure defaults are reported at startup

Usage:
    from tequilas.core.config import get_settings

    settings = get_settings()
    print(settings.database_url)

Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "change-me-tequilas-development-signing-key"
DEFAULT_ADMIN_PASSWORD = "Admin123$"


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local work, seeded data and default secrets
        PRODUCTION: Live environment
        STAGING: Pre-production testing
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Secrets (JWT key, admin password) should NEVER be committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Database
        database_url: SQLAlchemy async connection string

        # Authentication
        jwt_secret_key: HMAC key used to sign bearer tokens
        jwt_expire_hours: Token validity window

        # Catalog
        static_directory: Publicly served directory holding product images
        max_image_size_mb: Upload limit for product images
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Tequilas Restaurant API",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8001,
        description="API server port"
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    # ==========================================================================
    # DATABASE
    # ==========================================================================

    database_url: str = Field(
        default="sqlite+aiosqlite:///./tequilas.db",
        description="SQLAlchemy async connection URL (postgresql+psycopg://... in deployment)"
    )
    database_echo: bool = Field(
        default=False,
        description="Log every SQL statement"
    )

    # ==========================================================================
    # AUTHENTICATION (JWT)
    # ==========================================================================

    jwt_secret_key: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="HMAC secret used to sign bearer tokens"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    jwt_issuer: str = Field(
        default="tequilas-api",
        description="Token issuer claim"
    )
    jwt_audience: str = Field(
        default="tequilas-clients",
        description="Token audience claim"
    )
    jwt_expire_hours: int = Field(
        default=3,
        ge=1,
        description="Token validity window in hours"
    )

    # ==========================================================================
    # IDENTITY SEEDING
    # ==========================================================================

    admin_role: str = Field(
        default="Admin",
        description="Role name gating the back office"
    )
    admin_email: str = Field(
        default="admin@site.com",
        description="Email of the seeded administrator"
    )
    admin_password: str = Field(
        default=DEFAULT_ADMIN_PASSWORD,
        description="Password of the seeded administrator"
    )
    seed_catalog: bool = Field(
        default=True,
        description="Insert the starter menu when the catalog is empty"
    )

    # ==========================================================================
    # FILE STORAGE
    # ==========================================================================

    static_directory: str = Field(
        default="static",
        description="Publicly served directory (product images live below it)"
    )
    images_subdirectory: str = Field(
        default="images",
        description="Sub-directory of static_directory for product images"
    )
    max_image_size_mb: float = Field(
        default=5.0,
        gt=0,
        description="Maximum accepted image upload size"
    )
    allowed_image_extensions: str = Field(
        default=".jpg,.jpeg,.png,.gif,.webp",
        description="Comma-separated list of accepted image extensions"
    )
    data_directory: str = Field(
        default="data",
        description="Directory for generated report files"
    )
    report_filename: str = Field(
        default="sales_report.xlsx",
        description="Excel sales report filename"
    )
    report_lock_timeout: int = Field(
        default=30,
        description="Seconds to wait for the report file lock"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def allowed_image_extensions_list(self) -> list[str]:
        return [e.strip().lower() for e in self.allowed_image_extensions.split(",") if e.strip()]

    @property
    def max_image_size_bytes(self) -> int:
        return int(self.max_image_size_mb * 1024 * 1024)

    @property
    def static_path(self) -> Path:
        return Path(self.static_directory)

    @property
    def images_path(self) -> Path:
        return self.static_path / self.images_subdirectory

    @property
    def images_url_prefix(self) -> str:
        """Public URL prefix under which stored images are served."""
        return f"/{self.images_subdirectory.strip('/')}"

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Report settings still holding development defaults.

        Returns:
            List of insecure configuration keys (empty if all customised)
        """
        insecure = []

        if not self.is_development:
            if self.jwt_secret_key == DEFAULT_JWT_SECRET:
                insecure.append("JWT_SECRET_KEY")
            if self.admin_password == DEFAULT_ADMIN_PASSWORD:
                insecure.append("ADMIN_PASSWORD")
            if self.is_sqlite:
                insecure.append("DATABASE_URL")

        return insecure


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are read once per process so every module sees the same values.

    Returns:
        Settings: Configured application settings

    Example:
        >>> settings = get_settings()
        >>> print(settings.env_mode)
        EnvironmentMode.DEVELOPMENT
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured root logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    if not settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("tequilas")
