# src/session_registry/logging_config.py
"""
Logging configuration for applications embedding session_registry.

The library itself only ever calls ``logging.getLogger(__name__)``; nothing
is configured on import. Applications that want the packaged setup call
:func:`configure_logging` once at startup.

Configuration comes from the ``[logging]`` section loaded through confy
(see :mod:`session_registry.config.loader`) unless a dict is passed in, and
supports:
- A console handler gated by :class:`DisplayFilter`
- An optional file handler, either one file per run or a single rotating file
- Per-component log level overrides

**Display filter**: with ``console_enabled=False`` (the default) the console
handler still exists but only passes records logged with
``extra={"display": True}`` (see :func:`log_display`).

Usage:
    from session_registry.logging_config import configure_logging, log_display

    configure_logging(app_name="chat-gateway")

    import logging
    logger = logging.getLogger("chat_gateway.startup")
    log_display(logger, logging.INFO, "Registry ready with %d sessions", len(registry))
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from .config.loader import load_config
from .exceptions import ConfigError

DEFAULT_LOGGING_CONFIG: dict[str, Any] = {
    "console_enabled": False,
    "console_level": "WARNING",
    "console_format": "%(levelname)s - %(message)s",
    "file_enabled": False,
    "file_level": "DEBUG",
    "file_directory": "~/.local/share/session_registry/logs",
    "file_mode": "per_run",
    "file_name_pattern": "{app}_{timestamp:%Y%m%d_%H%M%S}.log",
    "file_single_name": "{app}.log",
    "file_format": "%(asctime)s [%(levelname)-8s] %(name)-30s - %(message)s (%(filename)s:%(lineno)d)",
    "rotation_max_bytes": 10 * 1024 * 1024,  # 10 MB
    "rotation_backup_count": 5,
    "display_min_level": "INFO",
    "components": {
        "session_registry": "INFO",
        "confy": "WARNING",
        "asyncio": "WARNING",
    },
}


def _resolve_level(level: str | int, default: int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else default


class DisplayFilter(logging.Filter):
    """Decides which records reach the console handler.

    With the console globally enabled every record passes and the handler
    level does the filtering. Otherwise only records carrying
    ``display=True`` at or above ``display_min_level`` pass.
    """

    def __init__(
        self,
        console_globally_enabled: bool = False,
        display_min_level: int = logging.INFO,
    ) -> None:
        super().__init__()
        self.console_globally_enabled = console_globally_enabled
        self.display_min_level = display_min_level

    def filter(self, record: logging.LogRecord) -> bool:
        if self.console_globally_enabled:
            return True
        if getattr(record, "display", False):
            return record.levelno >= self.display_min_level
        return False


class UnifiedLoggingManager:
    """
    Singleton that owns the handlers installed by :func:`configure_logging`.

    Configuration happens once per process unless ``force_reconfigure`` is
    passed; the setters below adjust levels afterwards.
    """

    _instance: Optional["UnifiedLoggingManager"] = None
    _configured: bool = False
    _log_file_path: Path | None = None
    _console_handler: logging.Handler | None = None
    _file_handler: logging.Handler | None = None
    _display_filter: DisplayFilter | None = None

    def __new__(cls) -> "UnifiedLoggingManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_instance(cls) -> "UnifiedLoggingManager":
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def get_log_file_path(cls) -> Path | None:
        return cls._log_file_path

    def configure(
        self,
        app_name: str = "session_registry",
        config: dict[str, Any] | None = None,
        config_file_path: str | Path | None = None,
        force_reconfigure: bool = False,
    ) -> Path | None:
        """
        Install console and file handlers on the root logger.

        Args:
            app_name: Application name, used in log file names.
            config: Logging section as a dict. Loaded through confy when omitted.
            config_file_path: User config file for confy (ignored if ``config`` is given).
            force_reconfigure: Replace handlers even if already configured.

        Returns:
            Path of the log file, or None when file logging is off.
        """
        if self._configured and not force_reconfigure:
            return self._log_file_path

        log_config = self._load_config(config, config_file_path)

        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.setLevel(logging.DEBUG)

        console_globally_enabled = bool(log_config.get("console_enabled", False))
        self._display_filter = DisplayFilter(
            console_globally_enabled=console_globally_enabled,
            display_min_level=_resolve_level(log_config.get("display_min_level", "INFO"), logging.INFO),
        )
        self._console_handler = self._create_console_handler(log_config)
        if not console_globally_enabled:
            # Filter is the only gate while the console is "off"
            self._console_handler.setLevel(logging.DEBUG)
        self._console_handler.addFilter(self._display_filter)
        root_logger.addHandler(self._console_handler)

        self._file_handler = None
        self._log_file_path = None
        if log_config.get("file_enabled", False):
            self._file_handler, self._log_file_path = self._create_file_handler(log_config, app_name)
            if self._file_handler:
                root_logger.addHandler(self._file_handler)

        components = log_config.get("components") or DEFAULT_LOGGING_CONFIG["components"]
        for component_name, level_str in dict(components).items():
            logging.getLogger(component_name).setLevel(_resolve_level(level_str, logging.INFO))

        UnifiedLoggingManager._configured = True
        UnifiedLoggingManager._log_file_path = self._log_file_path

        logging.getLogger(__name__).debug(f"Logging configured for '{app_name}'. Log file: {self._log_file_path}")
        return self._log_file_path

    def _load_config(
        self, config: dict[str, Any] | None, config_file_path: str | Path | None
    ) -> dict[str, Any]:
        if config is not None:
            return {**DEFAULT_LOGGING_CONFIG, **config}

        try:
            section = load_config(str(config_file_path) if config_file_path else None).get("logging")
        except ConfigError as e:
            sys.stderr.write(f"Warning: Falling back to default logging config: {e}\n")
            return DEFAULT_LOGGING_CONFIG.copy()

        if section:
            return {**DEFAULT_LOGGING_CONFIG, **dict(section)}
        return DEFAULT_LOGGING_CONFIG.copy()

    def _create_console_handler(self, config: dict[str, Any]) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_resolve_level(config.get("console_level", "WARNING"), logging.WARNING))
        handler.setFormatter(
            logging.Formatter(config.get("console_format", DEFAULT_LOGGING_CONFIG["console_format"]))
        )
        return handler

    def _create_file_handler(
        self, config: dict[str, Any], app_name: str
    ) -> tuple[logging.Handler | None, Path | None]:
        """Create the file handler.

        ``file_mode="single"`` writes one rotating file; anything else
        creates a fresh timestamped file per run.
        """
        log_dir = Path(os.path.expanduser(config.get("file_directory", DEFAULT_LOGGING_CONFIG["file_directory"])))
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            sys.stderr.write(f"Warning: Cannot create log directory {log_dir}: {e}\n")
            return None, None

        try:
            if config.get("file_mode", "per_run") == "single":
                pattern = config.get("file_single_name", DEFAULT_LOGGING_CONFIG["file_single_name"])
                try:
                    filename = pattern.format(app=app_name)
                except (KeyError, ValueError):
                    filename = f"{app_name}.log"
                log_file_path = log_dir / filename
                handler: logging.Handler = RotatingFileHandler(
                    log_file_path,
                    maxBytes=config.get("rotation_max_bytes", DEFAULT_LOGGING_CONFIG["rotation_max_bytes"]),
                    backupCount=config.get("rotation_backup_count", DEFAULT_LOGGING_CONFIG["rotation_backup_count"]),
                    encoding="utf-8",
                )
            else:
                pattern = config.get("file_name_pattern", DEFAULT_LOGGING_CONFIG["file_name_pattern"])
                timestamp = datetime.now()
                try:
                    filename = pattern.format(app=app_name, timestamp=timestamp)
                except (KeyError, ValueError):
                    filename = f"{app_name}_{timestamp.strftime('%Y%m%d_%H%M%S')}.log"
                log_file_path = log_dir / filename
                handler = logging.FileHandler(log_file_path, encoding="utf-8")
        except OSError as e:
            sys.stderr.write(f"Warning: Cannot create log file in {log_dir}: {e}\n")
            return None, None

        handler.setLevel(_resolve_level(config.get("file_level", "DEBUG"), logging.DEBUG))
        handler.setFormatter(logging.Formatter(config.get("file_format", DEFAULT_LOGGING_CONFIG["file_format"])))
        return handler, log_file_path

    def set_console_level(self, level: str | int) -> None:
        if self._console_handler is not None:
            self._console_handler.setLevel(_resolve_level(level, self._console_handler.level))

    def set_file_level(self, level: str | int) -> None:
        if self._file_handler is not None:
            self._file_handler.setLevel(_resolve_level(level, self._file_handler.level))

    def set_component_level(self, component: str, level: str | int) -> None:
        component_logger = logging.getLogger(component)
        component_logger.setLevel(_resolve_level(level, component_logger.level))

    def disable_console(self) -> None:
        """Remove the console handler; even ``display=True`` records stop showing."""
        if self._console_handler:
            logging.getLogger().removeHandler(self._console_handler)
            self._console_handler = None
            self._display_filter = None

    def enable_console(self, level: str = "WARNING") -> None:
        """Install a console handler that passes every record at or above ``level``."""
        if self._display_filter is not None and self._display_filter.console_globally_enabled:
            return

        if self._console_handler is not None:
            logging.getLogger().removeHandler(self._console_handler)

        self._console_handler = self._create_console_handler({"console_level": level})
        self._display_filter = DisplayFilter(console_globally_enabled=True, display_min_level=logging.DEBUG)
        self._console_handler.addFilter(self._display_filter)
        logging.getLogger().addHandler(self._console_handler)


def configure_logging(
    app_name: str = "session_registry",
    config: dict[str, Any] | None = None,
    config_file_path: str | Path | None = None,
    force_reconfigure: bool = False,
) -> Path | None:
    """
    Configure logging for the application. Call once, early in startup.

    Example:
        configure_logging(
            app_name="chat-gateway",
            config={"console_enabled": True, "console_level": "DEBUG"},
        )
    """
    return UnifiedLoggingManager.get_instance().configure(
        app_name=app_name,
        config=config,
        config_file_path=config_file_path,
        force_reconfigure=force_reconfigure,
    )


def log_display(
    logger: logging.Logger,
    level: int,
    msg: str,
    *args: Any,
    **kwargs: Any,
) -> None:
    """Log a message that also reaches the console in silent mode.

    Merges ``display=True`` into any ``extra`` the caller passes.
    ``display_min_level`` still applies.
    """
    extra = kwargs.pop("extra", None) or {}
    extra["display"] = True
    kwargs["extra"] = extra
    logger.log(level, msg, *args, **kwargs)


def get_log_file_path() -> Path | None:
    return UnifiedLoggingManager.get_log_file_path()


def set_console_level(level: str | int) -> None:
    UnifiedLoggingManager.get_instance().set_console_level(level)


def set_file_level(level: str | int) -> None:
    UnifiedLoggingManager.get_instance().set_file_level(level)


def set_component_level(component: str, level: str | int) -> None:
    UnifiedLoggingManager.get_instance().set_component_level(component, level)


def disable_console_logging() -> None:
    UnifiedLoggingManager.get_instance().disable_console()


def enable_console_logging(level: str = "WARNING") -> None:
    UnifiedLoggingManager.get_instance().enable_console(level)
