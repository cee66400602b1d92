"""
Configuration module for dotstore.

Uses pydantic-settings for environment variable loading.
"""

from dotstore.config.settings import CacheConfig, Settings

__all__ = ["CacheConfig", "Settings"]
