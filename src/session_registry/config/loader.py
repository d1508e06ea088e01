# src/session_registry/config/loader.py
"""
Configuration loading for session_registry.

Sources are layered by confy, lowest to highest precedence:

1. Packaged defaults (``default_config.toml``)
2. An optional user TOML file
3. Environment variables with the given prefix
4. An explicit overrides dict (dotted keys)
"""

import importlib.resources
import logging
import tomllib
from typing import Any, Dict, Optional

from confy.loader import Config as ConfyConfig
from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import SessionRegistryConfig

logger = logging.getLogger(__name__)

DEFAULT_ENV_PREFIX = "SESSION_REGISTRY"


def load_default_config() -> Dict[str, Any]:
    """Read the packaged ``default_config.toml`` into a dict."""
    defaults_path = importlib.resources.files("session_registry.config").joinpath("default_config.toml")
    with defaults_path.open("rb") as f:
        return tomllib.load(f)


def load_config(
    config_file_path: Optional[str] = None,
    env_prefix: Optional[str] = DEFAULT_ENV_PREFIX,
    overrides: Optional[Dict[str, Any]] = None,
) -> ConfyConfig:
    """
    Builds the layered confy configuration.

    Args:
        config_file_path: Optional path to a user TOML file.
        env_prefix: Prefix for environment variable overrides. None disables them.
        overrides: Dotted-key overrides applied last, e.g.
                   ``{"registry.max_transcript_entries": 50}``.

    Returns:
        The loaded confy Config object.

    Raises:
        ConfigError: If any configuration source cannot be read.
    """
    try:
        config = ConfyConfig(
            defaults=load_default_config(),
            file_path=config_file_path,
            prefix=env_prefix,
            overrides_dict=overrides,
        )
    except Exception as e:
        raise ConfigError(f"session_registry configuration loading failed: {e}")

    logger.debug(f"Configuration loaded (file={config_file_path}, prefix={env_prefix})")
    return config


def load_registry_config(
    config_file_path: Optional[str] = None,
    env_prefix: Optional[str] = DEFAULT_ENV_PREFIX,
    overrides: Optional[Dict[str, Any]] = None,
) -> SessionRegistryConfig:
    """
    Loads and validates the ``[registry]`` section.

    Takes the same arguments as :func:`load_config`.

    Raises:
        ConfigError: If loading fails or the section does not validate.
    """
    config = load_config(config_file_path, env_prefix, overrides)
    section = config.get("registry") or {}
    try:
        section_dict = dict(section)
    except (TypeError, ValueError):
        raise ConfigError(f"'registry' config section must be a table, got {type(section).__name__}")

    try:
        return SessionRegistryConfig.model_validate(section_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid 'registry' configuration: {e}")
