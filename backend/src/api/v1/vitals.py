"""Vital sign endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.core.dependencies import get_current_identity, get_vitals_service
from src.core.security import Identity
from src.schemas.common import MessageResponse
from src.schemas.vital import (
    VitalCreate,
    VitalCreatedResponse,
    VitalListResponse,
    VitalResponse,
    VitalSummaryEntry,
    VitalSummaryResponse,
    VitalTrendFilters,
    VitalTrendPoint,
    VitalTrendResponse,
)
from src.services.vitals_service import VitalsService

router = APIRouter(prefix="/vitals", tags=["vitals"])


@router.post("", response_model=VitalCreatedResponse, status_code=201)
async def add_vital(
    body: VitalCreate,
    identity: Identity = Depends(get_current_identity),
    service: VitalsService = Depends(get_vitals_service),
):
    """Add a measurement to one of your reports."""
    vital = service.add_vital(
        identity,
        body.report_id,
        body.vital_type,
        body.value,
        body.unit,
        body.measured_at,
    )
    return VitalCreatedResponse(
        message="Vital added successfully", vital=VitalResponse.model_validate(vital)
    )


@router.get("/report/{report_id}", response_model=VitalListResponse)
async def list_report_vitals(
    report_id: str,
    identity: Identity = Depends(get_current_identity),
    service: VitalsService = Depends(get_vitals_service),
):
    vitals = service.list_vitals_for_report(report_id, identity)
    return VitalListResponse(vitals=[VitalResponse.model_validate(v) for v in vitals])


@router.get("/trends", response_model=VitalTrendResponse)
async def get_vitals_trend(
    vital_type: Optional[str] = Query(None, description="e.g. Blood Pressure"),
    start_date: Optional[date] = Query(None, description="Report date lower bound"),
    end_date: Optional[date] = Query(None, description="Report date upper bound"),
    identity: Identity = Depends(get_current_identity),
    service: VitalsService = Depends(get_vitals_service),
):
    """Your measurements over time, oldest first."""
    filters = VitalTrendFilters(
        vital_type=vital_type, start_date=start_date, end_date=end_date
    )
    rows = service.vitals_trend(identity, filters)
    return VitalTrendResponse(
        vitals=[
            VitalTrendPoint(
                **VitalResponse.model_validate(vital).model_dump(),
                report_date=report_date,
            )
            for vital, report_date in rows
        ]
    )


@router.get("/summary", response_model=VitalSummaryResponse)
async def get_vitals_summary(
    identity: Identity = Depends(get_current_identity),
    service: VitalsService = Depends(get_vitals_service),
):
    """Count and latest value per (type, unit)."""
    summary = service.vitals_summary(identity)
    return VitalSummaryResponse(summary=[VitalSummaryEntry(**e) for e in summary])


@router.delete("/{vital_id}", response_model=MessageResponse)
async def delete_vital(
    vital_id: str,
    identity: Identity = Depends(get_current_identity),
    service: VitalsService = Depends(get_vitals_service),
):
    service.delete_vital(vital_id, identity)
    return MessageResponse(message="Vital deleted successfully")
