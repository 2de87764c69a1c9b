"""
Configuration dataclasses for the registrar adapter.

This module defines the configuration structures used by the adapter:
registrar credentials and endpoint, and logging output settings.
"""

from dataclasses import dataclass, field
from typing import Optional


DEFAULT_BASE_URL = "https://api.neostrada.com/api"
DEFAULT_HANDLE_KEY = "neostrada"


@dataclass
class RegistrarConfig:
    """Credentials and endpoint for the registrar API."""

    access_token: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    # Only kept for plugin contract compatibility; the API authenticates by token.
    username: Optional[str] = None
    # Key under which handles issued by this registrar are cached by the host.
    handle_key: str = DEFAULT_HANDLE_KEY


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class AdapterConfig:
    """Main configuration combining all sub-configurations."""

    registrar: RegistrarConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
