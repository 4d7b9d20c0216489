"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "toolcrib.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class StockSettings(BaseSettings):
    """Stock ledger configuration."""

    model_config = SettingsConfigDict(env_prefix="STOCK_")

    # Status cut points: >= sufficient_level is sufficient, >= low_level is low
    sufficient_level: int = 50
    low_level: int = 20

    # Bounds and location for aggregates created by a first movement
    default_min_stock: int = 50
    default_max_stock: int = 500
    default_location: str = "Warehouse A"

    default_operator: str = "admin"
    default_outbound_purpose: str = "replace"
    default_edit_purpose: str = "prepared"

    # Tool-change history
    replace_purpose: str = "replace"
    replace_change_reason: str = "preventive_replacement"
    fallback_change_reason: str = "end_of_life"
    tool_change_window_seconds: int = 60

    @model_validator(mode="after")
    def check_levels(self) -> "StockSettings":
        if self.low_level < 0 or self.sufficient_level < 0:
            raise ValueError("stock levels must be non-negative")
        if self.low_level > self.sufficient_level:
            raise ValueError("low_level must not exceed sufficient_level")
        if self.default_min_stock > self.default_max_stock:
            raise ValueError("default_min_stock must not exceed default_max_stock")
        return self


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Toolcrib Stock Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    stock: StockSettings = Field(default_factory=StockSettings)
    api: APISettings = Field(default_factory=APISettings)


# Loaded once per process; services get it through the container
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the process settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
