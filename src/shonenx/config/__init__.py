"""Configuration module for ShonenX."""

from .settings import LoggingSettings, ProviderSettings, Settings, get_settings

__all__ = ["LoggingSettings", "ProviderSettings", "Settings", "get_settings"]
