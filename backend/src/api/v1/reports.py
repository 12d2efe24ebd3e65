"""
Report upload, retrieval, search and deletion endpoints (v1).
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from src.core.config import Settings
from src.core.dependencies import (
    get_current_identity,
    get_report_manager,
    get_settings_dependency,
)
from src.core.exceptions import ValidationError
from src.core.security import Identity
from src.schemas.common import MessageResponse
from src.schemas.report import (
    ReportCreateResult,
    ReportDetailResponse,
    ReportListItem,
    ReportListResponse,
    ReportMetadata,
    ReportResponse,
    ReportSearchFilters,
    ReportSearchResponse,
    ReportUpdate,
)
from src.schemas.vital import VitalEntry, VitalResponse
from src.services.report_service import ReportLifecycleManager
from src.utils.file_utils import format_file_size, is_allowed_upload

router = APIRouter(prefix="/reports", tags=["reports"])

vital_entries = TypeAdapter(List[VitalEntry])


def _parse_vitals(raw: Optional[str]) -> List[VitalEntry]:
    """Decode the multipart ``vitals`` field: a JSON list of {type, value, unit}."""
    if not raw or not raw.strip():
        return []
    try:
        return vital_entries.validate_json(raw)
    except PydanticValidationError:
        raise ValidationError(
            "Vitals must be a JSON list of objects with type, value and unit",
            ["vitals"],
        )


@router.post("/upload", response_model=ReportCreateResult, status_code=201)
async def upload_report(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    report_type: Optional[str] = Form(None),
    report_date: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    vitals: Optional[str] = Form(None),
    identity: Identity = Depends(get_current_identity),
    settings: Settings = Depends(get_settings_dependency),
    manager: ReportLifecycleManager = Depends(get_report_manager),
):
    """
    Upload a medical report (PDF or image) with optional vitals.

    Flow:
    1. Validate file type and size
    2. Validate metadata and the vitals payload
    3. Store the file
    4. Create the report, then its vitals

    A vital that cannot be saved does not fail the upload; the response then
    has ``status: "partial"`` and lists the failed entries.
    """
    if not file.filename:
        raise ValidationError("No file uploaded", ["file"])

    if not is_allowed_upload(
        file.filename,
        file.content_type,
        settings.allowed_extensions,
        settings.allowed_mime_types,
    ):
        raise ValidationError("Only PDF and image files are allowed", ["file"])

    content = await file.read()
    max_size = settings.max_file_size_mb * 1024 * 1024
    if len(content) > max_size:
        raise ValidationError(
            f"File too large ({format_file_size(len(content))}). "
            f"Maximum size: {settings.max_file_size_mb}MB",
            ["file"],
        )

    metadata = ReportMetadata(
        title=title, report_type=report_type, report_date=report_date, notes=notes
    )
    entries = _parse_vitals(vitals)

    return await manager.upload_report(
        identity,
        metadata,
        content=content,
        filename=file.filename,
        content_type=file.content_type,
        vitals=entries,
    )


@router.get("", response_model=ReportListResponse)
async def list_reports(
    identity: Identity = Depends(get_current_identity),
    manager: ReportLifecycleManager = Depends(get_report_manager),
):
    """All reports owned by the current user, newest report date first."""
    rows = manager.list_reports_for_owner(identity)
    reports = [
        ReportListItem(
            **ReportResponse.model_validate(report).model_dump(), vital_count=count
        )
        for report, count in rows
    ]
    return ReportListResponse(count=len(reports), reports=reports)


@router.get("/visible", response_model=ReportSearchResponse)
async def list_visible_reports(
    identity: Identity = Depends(get_current_identity),
    manager: ReportLifecycleManager = Depends(get_report_manager),
):
    """Reports you own plus reports shared with you."""
    reports = manager.list_visible_reports(identity)
    return ReportSearchResponse(
        count=len(reports),
        reports=[ReportResponse.model_validate(r) for r in reports],
    )


@router.get("/search", response_model=ReportSearchResponse)
async def search_reports(
    start_date: Optional[date] = Query(None, description="ISO date, e.g. 2024-01-01"),
    end_date: Optional[date] = Query(None, description="ISO date, e.g. 2024-12-31"),
    report_type: Optional[str] = Query(None),
    vital_type: Optional[str] = Query(None, description="Only reports with this vital"),
    identity: Identity = Depends(get_current_identity),
    manager: ReportLifecycleManager = Depends(get_report_manager),
):
    filters = ReportSearchFilters(
        start_date=start_date,
        end_date=end_date,
        report_type=report_type,
        vital_type=vital_type,
    )
    reports = manager.search_reports(identity, filters)
    return ReportSearchResponse(
        count=len(reports),
        reports=[ReportResponse.model_validate(r) for r in reports],
    )


@router.get("/{report_id}", response_model=ReportDetailResponse)
async def get_report(
    report_id: str,
    identity: Identity = Depends(get_current_identity),
    manager: ReportLifecycleManager = Depends(get_report_manager),
):
    """Report with its vitals. Available to the owner and to grantees."""
    view = manager.get_report(report_id, identity)
    return ReportDetailResponse(
        report=ReportResponse.model_validate(view.report),
        vitals=[VitalResponse.model_validate(v) for v in view.vitals],
        capability=view.decision.capability.value,
        can_modify=view.decision.is_owner,
    )


@router.get("/{report_id}/file")
async def get_report_file(
    report_id: str,
    identity: Identity = Depends(get_current_identity),
    manager: ReportLifecycleManager = Depends(get_report_manager),
):
    """Stream back the uploaded file."""
    stored = await manager.get_report_file(report_id, identity)
    return Response(
        content=stored.content,
        media_type=stored.content_type,
        headers={"Content-Disposition": f'inline; filename="{stored.filename}"'},
    )


@router.patch("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: str,
    body: ReportUpdate,
    identity: Identity = Depends(get_current_identity),
    manager: ReportLifecycleManager = Depends(get_report_manager),
):
    """Edit report metadata. Owner only."""
    report = manager.update_report(report_id, identity, body)
    return ReportResponse.model_validate(report)


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_report(
    report_id: str,
    identity: Identity = Depends(get_current_identity),
    manager: ReportLifecycleManager = Depends(get_report_manager),
):
    """Delete a report, its file, vitals and shares. Owner only."""
    await manager.delete_report(report_id, identity)
    return MessageResponse(message="Report deleted successfully")
