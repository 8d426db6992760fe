# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import get_settings
#   settings = get_settings()
#   print(settings.MONDAY_BOARD_ID)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (.env.production when ENVIRONMENT=production)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime. Settings are frozen: components receive
# the values they need through their constructors.
# =============================================================================

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _is_production_env() -> bool:
    return os.environ.get("ENVIRONMENT") == "production"


def _env_file() -> str:
    """Pick the dotenv file for the current environment."""
    return ".env.production" if _is_production_env() else ".env"


def _default_base_path() -> str:
    if _is_production_env():
        return "/tmp"
    return "C:\\Users\\{User}\\OneDrive"


def _default_model_file() -> str:
    if _is_production_env():
        return "/tmp/modelo.vsdx"
    return "C:\\OneDrive\\Onboarding\\#Backoffice\\#BOT Extensão\\Modelo Fluxo.vsdx"


DEFAULT_PRODUCT_FOLDERS = {
    "Fórmula Certa": "#FCERTA EXTENSÃO",
    "Phusion": "#PHUSION EXTENSÃO",
}

DEFAULT_PRODUCT_RESPONSIBLES = {
    "Fórmula Certa": "Pedro.Ribeiro@fagrontech.com.br",
    "Phusion": "Bruno.Vaz@fagrontech.com.br",
}


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    Build it once with get_settings() and pass it (or values derived from
    it) into the components that need it.
    """

    # -------------------------------------------------------------------------
    # Monday.com Configuration
    # -------------------------------------------------------------------------
    # Token and board are required - app won't start without them

    MONDAY_API_TOKEN: str = Field(
        ...,  # ... means required (no default)
        min_length=1,
        description="Monday.com API token (sent in the Authorization header)"
    )

    MONDAY_BOARD_ID: str = Field(
        ...,
        min_length=1,
        description="ID of the board holding the onboarding demands"
    )

    MONDAY_API_URL: str = Field(
        default="https://api.monday.com/v2",
        description="Monday.com GraphQL endpoint"
    )

    MONDAY_API_VERSION: str = Field(
        default="2023-10",
        description="Value of the API-Version header"
    )

    MONDAY_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for every request sent to Monday.com"
    )

    # -------------------------------------------------------------------------
    # Filesystem Paths
    # -------------------------------------------------------------------------
    # {User} inside BASE_USER_PATH is replaced by the current OS user name

    BASE_USER_PATH: str = Field(
        default_factory=_default_base_path,
        description="Root under which product folders live"
    )

    MODEL_FILE_PATH: str = Field(
        default_factory=_default_model_file,
        description="Template file copied into every client folder"
    )

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------
    # Both maps are keyed by product label and must have the same keys.
    # Set them as JSON in the environment to add a product.

    PRODUCT_FOLDERS: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PRODUCT_FOLDERS),
        description="Folder segment per product"
    )

    PRODUCT_RESPONSIBLES: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PRODUCT_RESPONSIBLES),
        description="Responsible party email per product"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins in production (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level (DEBUG forces DEBUG)"
    )

    LOG_DIR: str | None = Field(
        default=None,
        description="Directory for combined.log / error.log (console only when unset)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=_env_file(),
        env_file_encoding="utf-8",
        # Empty variables fall back to defaults
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="after")
    def check_product_maps(self) -> "Settings":
        folders = set(self.PRODUCT_FOLDERS)
        responsibles = set(self.PRODUCT_RESPONSIBLES)
        if not folders:
            raise ValueError("PRODUCT_FOLDERS must configure at least one product")
        if folders != responsibles:
            raise ValueError(
                "PRODUCT_FOLDERS and PRODUCT_RESPONSIBLES must list the same products "
                f"(only in folders: {sorted(folders - responsibles)}, "
                f"only in responsibles: {sorted(responsibles - folders)})"
            )
        return self

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


def load_settings() -> Settings:
    """
    Build Settings, turning missing required variables into one clear error.

    Raises:
        ConfigurationError: If a required variable is missing or a value is invalid
    """
    try:
        return Settings()
    except ValidationError as e:
        missing = [
            str(err["loc"][0])
            for err in e.errors()
            if err["type"] == "missing" and err["loc"]
        ]
        if missing:
            raise ConfigurationError(
                f"Required environment variables not configured: {', '.join(missing)}. "
                "Set them in the .env file or in the production environment."
            ) from e
        raise ConfigurationError(f"Invalid configuration: {e}") from e


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return load_settings()
