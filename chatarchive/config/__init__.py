"""
Configuration management for Chat Archive.
"""

from .settings import Settings, StoreConfig, configure_logging, get_settings

__all__ = ["Settings", "StoreConfig", "configure_logging", "get_settings"]
