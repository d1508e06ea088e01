# src/session_registry/config/__init__.py
"""
Configuration module for the session_registry library.

Settings are loaded with the `confy` library on top of the packaged
``default_config.toml``.

Environment variables:
    - Prefix: SESSION_REGISTRY_
    - Nested keys use double underscores: SESSION_REGISTRY_REGISTRY__ENABLE_STATS
"""

from .loader import load_config, load_default_config, load_registry_config
from .models import SessionRegistryConfig

__all__ = [
    "SessionRegistryConfig",
    "load_config",
    "load_default_config",
    "load_registry_config",
]
