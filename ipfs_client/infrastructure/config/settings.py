"""
Configuration settings - Infrastructure component for managing client configuration.
Uses Pydantic for validation and environment variable loading.
"""

from __future__ import annotations
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Connection settings for one IPFS daemon."""

    model_config = SettingsConfigDict(
        env_prefix='IPFS_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    host: str = Field('localhost', description='Daemon host name')
    port: int = Field(5001, ge=1, le=65535, description='Daemon API TCP port')
    # Advisory server-side timeout such as "20s"; empty means none
    timeout: str = ''
    protocol: str = 'http://'
    api_path: str = '/api/v0'
    verbose: bool = False

    # Logging
    log_level: str = 'INFO'

    @field_validator('host')
    @classmethod
    def validate_host(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('host must not be empty')
        return v

    @field_validator('timeout')
    @classmethod
    def strip_timeout(cls, v: str) -> str:
        return v.strip()

    @field_validator('protocol')
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        """Accept "http://"/"https://", or the bare scheme."""
        v = v.strip().lower()
        if v in ('http', 'https'):
            v += '://'
        if v not in ('http://', 'https://'):
            raise ValueError('protocol must be "http://" or "https://"')
        return v

    @field_validator('api_path')
    @classmethod
    def normalize_api_path(cls, v: str) -> str:
        v = v.strip().rstrip('/')
        if v and not v.startswith('/'):
            v = '/' + v
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            return 'INFO'
        return v.upper()

    @property
    def url_prefix(self) -> str:
        return f"{self.protocol}{self.host}:{self.port}{self.api_path}"


# Global settings instance
_settings: Optional[ClientSettings] = None


def get_settings() -> ClientSettings:
    """Get global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = ClientSettings()
    return _settings


def reload_settings() -> ClientSettings:
    """Reload settings from environment (for testing)."""
    global _settings
    _settings = ClientSettings()
    return _settings
