# src/session_registry/config/models.py
"""
Pydantic models for session_registry configuration validation.

The library reads its settings through confy's dictionary-based
configuration; the ``[registry]`` section is validated into
:class:`SessionRegistryConfig` before a registry is built from it.
"""

from pydantic import BaseModel, ConfigDict, Field


class SessionRegistryConfig(BaseModel):
    """Configuration for the session registry.

    Attributes:
        max_transcript_entries: Maximum entries kept per transcript. When a
            transcript grows past this, the oldest entries are dropped.
            0 means unlimited.
        enable_stats: Whether to track per-operation counters.
    """

    model_config = ConfigDict(extra="ignore")

    max_transcript_entries: int = Field(
        default=0, ge=0, description="Maximum entries per transcript (0=unlimited)"
    )
    enable_stats: bool = Field(default=True, description="Enable operation counters")
