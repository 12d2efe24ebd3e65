"""
Shared response schemas.
"""

from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class HealthCheck(BaseModel):
    """Health check response schema."""

    status: str = "healthy"
    version: str
    timestamp: datetime = Field(default_factory=datetime.now)


class ErrorResponse(BaseModel):
    """Error body produced by the exception handler."""

    detail: str
    code: str
    details: Optional[Dict[str, Any]] = None


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
