# src/session_registry/__init__.py
"""
session_registry - In-memory registry of live conversational sessions and
their transcripts.

A calling layer stores the session objects it creates under string ids,
records transcript entries as the conversation progresses, looks sessions
up again by id, and drops them when the conversation ends. Sessions and
entries are opaque to the registry; nothing is persisted.
"""

from importlib.metadata import PackageNotFoundError, version

from .config import SessionRegistryConfig, load_config, load_registry_config
from .exceptions import ConfigError, SessionNotFoundError, SessionRegistryError
from .sessions import AsyncSessionRegistry, SessionRegistry, create_session_registry

try:
    __version__ = version("session-registry")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"


__all__ = [
    # Registry
    "SessionRegistry",
    "AsyncSessionRegistry",
    "create_session_registry",

    # Configuration
    "SessionRegistryConfig",
    "load_config",
    "load_registry_config",

    # Exceptions
    "SessionRegistryError",
    "ConfigError",
    "SessionNotFoundError",
]
