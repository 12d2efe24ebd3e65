"""
API package: versioned routers mounted under /api.
"""

from src.api.v1 import router

__all__ = ["router"]
