"""Database models."""

from .base import Base, TimestampMixin
from .user import User
from .report import Report, Vital
from .share import ShareGrant

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Report",
    "Vital",
    "ShareGrant",
]
