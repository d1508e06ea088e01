# src/session_registry/sessions/__init__.py
"""
Session registry module for the session_registry library.

Components:
    - SessionRegistry: Thread-safe store of session handles and transcripts
    - AsyncSessionRegistry: Coroutine facade for asyncio callers
"""

from .async_registry import AsyncSessionRegistry
from .registry import SessionRegistry, create_session_registry

__all__ = [
    "SessionRegistry",
    "AsyncSessionRegistry",
    "create_session_registry",
]
