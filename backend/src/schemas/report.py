"""
Pydantic schemas for report requests, results and responses.
"""

from typing import List, Optional
from datetime import date, datetime
from enum import Enum
from pydantic import BaseModel

from src.schemas.vital import VitalResponse


class ReportMetadata(BaseModel):
    """
    User-supplied metadata of a report.

    Required fields are checked by the lifecycle manager, not here, so that
    a missing field yields the same ValidationError on every entry point.
    """

    title: Optional[str] = None
    report_type: Optional[str] = None
    report_date: Optional[str] = None
    notes: Optional[str] = None


class ReportUpdate(BaseModel):
    """Partial metadata update; omitted fields are left unchanged."""

    title: Optional[str] = None
    report_type: Optional[str] = None
    report_date: Optional[str] = None
    notes: Optional[str] = None


class CreateStatus(str, Enum):
    CREATED = "created"
    PARTIAL = "partial"


class VitalFailure(BaseModel):
    """A vital from an upload batch that was not persisted."""

    index: int
    vital_type: Optional[str] = None
    reason: str


class ReportCreateResult(BaseModel):
    """
    Outcome of creating a report with its vitals batch.

    ``status == "partial"`` is the PartialFailure case: the report exists but
    at least one vital in ``failed_vitals`` does not.
    """

    report_id: str
    status: CreateStatus
    message: str
    vitals_saved: List[str] = []
    failed_vitals: List[VitalFailure] = []

    @property
    def is_partial(self) -> bool:
        return self.status == CreateStatus.PARTIAL


class ReportResponse(BaseModel):
    id: str
    user_id: str
    title: str
    report_type: str
    file_type: str
    original_name: Optional[str] = None
    report_date: date
    upload_date: datetime
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class ReportListItem(ReportResponse):
    vital_count: int = 0


class ReportListResponse(BaseModel):
    count: int
    reports: List[ReportListItem]


class ReportSearchResponse(BaseModel):
    count: int
    reports: List[ReportResponse]


class ReportDetailResponse(BaseModel):
    """A report with its vitals and what the requester may do with it."""

    report: ReportResponse
    vitals: List[VitalResponse]
    capability: str
    can_modify: bool


class ReportSearchFilters(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    report_type: Optional[str] = None
    vital_type: Optional[str] = None
