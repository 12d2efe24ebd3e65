"""
Core package initialization.
"""

from src.core.config import settings, get_settings

__all__ = [
    "settings",
    "get_settings",
]
