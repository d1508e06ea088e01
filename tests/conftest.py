# tests/conftest.py
"""
Shared pytest configuration for session_registry tests.
"""

import sys
from pathlib import Path

# Add source to path for testing without an editable install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
