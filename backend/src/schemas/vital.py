"""
Vital sign schemas.
"""

from typing import List, Optional, Union
from datetime import date, datetime
from pydantic import BaseModel, Field


class VitalEntry(BaseModel):
    """
    One measurement supplied with a report upload.

    Fields are optional at the schema level on purpose: a blank entry must not
    reject the whole upload, it is reported back as a failed vital instead.
    """

    vital_type: Optional[str] = Field(None, alias="type")
    value: Optional[str] = None
    unit: Optional[str] = None
    measured_at: Optional[Union[datetime, str]] = None

    class Config:
        populate_by_name = True
        coerce_numbers_to_str = True
        json_schema_extra = {
            "example": {"type": "Heart Rate", "value": "72", "unit": "bpm"}
        }


class VitalCreate(BaseModel):
    """Request body for adding a vital to an existing report."""

    report_id: str = Field(..., alias="reportId")
    vital_type: Optional[str] = Field(None, alias="vitalType")
    value: Optional[str] = None
    unit: Optional[str] = None
    measured_at: Optional[datetime] = Field(None, alias="measuredAt")

    class Config:
        populate_by_name = True
        coerce_numbers_to_str = True


class VitalResponse(BaseModel):
    id: str
    report_id: str
    vital_type: str
    value: str
    unit: str
    measured_at: datetime

    class Config:
        from_attributes = True


class VitalCreatedResponse(BaseModel):
    message: str
    vital: VitalResponse


class VitalTrendPoint(VitalResponse):
    """A vital with the clinical date of the report it came from."""

    report_date: date


class VitalTrendFilters(BaseModel):
    vital_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class VitalSummaryEntry(BaseModel):
    """Aggregate of one (type, unit) series."""

    vital_type: str
    unit: str
    count: int
    latest_value: str
    latest_measurement: datetime


class VitalListResponse(BaseModel):
    vitals: List[VitalResponse]


class VitalTrendResponse(BaseModel):
    vitals: List[VitalTrendPoint]


class VitalSummaryResponse(BaseModel):
    summary: List[VitalSummaryEntry]
