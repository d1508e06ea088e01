# src/session_registry/exceptions.py
"""
Custom exceptions for the session_registry library.

Registry operations themselves never raise: a missing id is reported as
``None`` or an empty transcript. The classes below cover the surrounding
concerns (configuration loading) and the opt-in ``require_session`` lookup
for callers that need "session must exist" semantics.
"""

class SessionRegistryError(Exception):
    """Base class for all session_registry specific errors."""
    def __init__(self, message: str = "An unspecified error occurred in the session registry."):
        super().__init__(message)

class ConfigError(SessionRegistryError):
    """Raised for errors related to configuration loading or validation."""
    def __init__(self, message: str = "Configuration error."):
        super().__init__(message)

class SessionNotFoundError(SessionRegistryError):
    """
    Raised when a session handle is required but none is stored for the id.
    Only ``SessionRegistry.require_session`` raises this; ``get_session``
    returns None instead.
    """
    def __init__(self, session_id: str, message: str = "Session not found."):
        self.session_id = session_id
        super().__init__(f"{message} Session ID: '{session_id}'")
