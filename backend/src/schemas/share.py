"""Share grant schemas."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from src.schemas.report import ReportResponse


class ShareRequest(BaseModel):
    report_id: str = Field(..., alias="reportId")
    email: str

    class Config:
        populate_by_name = True


class ShareResponse(BaseModel):
    id: str
    report_id: str
    shared_by: str
    shared_with_email: str
    shared_with_user_id: Optional[str] = None
    access_level: str
    shared_at: datetime

    class Config:
        from_attributes = True


class ShareCreatedResponse(BaseModel):
    message: str
    share_id: str
    share: ShareResponse


class ReportShareItem(ShareResponse):
    """Grant on one report, as listed to its owner."""

    recipient_name: Optional[str] = None


class SentShareItem(ReportShareItem):
    report_title: str


class ReceivedShareItem(BaseModel):
    """A report someone else shared with the requester."""

    share_id: str
    shared_at: datetime
    owner_name: str
    owner_email: str
    report: ReportResponse


class ReportSharesResponse(BaseModel):
    shares: List[ReportShareItem]


class SentSharesResponse(BaseModel):
    shares: List[SentShareItem]


class ReceivedSharesResponse(BaseModel):
    reports: List[ReceivedShareItem]
