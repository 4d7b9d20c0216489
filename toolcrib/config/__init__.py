"""Configuration module."""

from toolcrib.config.logging import configure_logging, get_logger
from toolcrib.config.settings import Settings, StockSettings, get_settings, reset_settings

__all__ = [
    "Settings",
    "StockSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
]
