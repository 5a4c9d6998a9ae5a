"""Configuration package."""

from .settings import ClientSettings, get_settings, reload_settings

__all__ = ['ClientSettings', 'get_settings', 'reload_settings']
