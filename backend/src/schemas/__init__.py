"""
Schemas package initialization.
"""

from src.schemas.common import HealthCheck, ErrorResponse, MessageResponse
from src.schemas.report import (
    CreateStatus,
    ReportCreateResult,
    ReportDetailResponse,
    ReportListItem,
    ReportMetadata,
    ReportResponse,
    ReportSearchFilters,
    ReportUpdate,
    VitalFailure,
)
from src.schemas.vital import (
    VitalCreate,
    VitalEntry,
    VitalResponse,
    VitalSummaryEntry,
    VitalTrendFilters,
    VitalTrendPoint,
)
from src.schemas.share import (
    ReceivedShareItem,
    ReportShareItem,
    SentShareItem,
    ShareRequest,
    ShareResponse,
)
from src.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserResponse

__all__ = [
    "HealthCheck",
    "ErrorResponse",
    "MessageResponse",
    "CreateStatus",
    "ReportCreateResult",
    "ReportDetailResponse",
    "ReportListItem",
    "ReportMetadata",
    "ReportResponse",
    "ReportSearchFilters",
    "ReportUpdate",
    "VitalFailure",
    "VitalCreate",
    "VitalEntry",
    "VitalResponse",
    "VitalSummaryEntry",
    "VitalTrendFilters",
    "VitalTrendPoint",
    "ReceivedShareItem",
    "ReportShareItem",
    "SentShareItem",
    "ShareRequest",
    "ShareResponse",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "UserResponse",
]
