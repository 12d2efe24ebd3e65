"""Report sharing endpoints."""

from fastapi import APIRouter, Depends

from src.core.dependencies import get_current_identity, get_sharing_manager
from src.core.security import Identity
from src.schemas.common import MessageResponse
from src.schemas.report import ReportResponse
from src.schemas.share import (
    ReceivedShareItem,
    ReceivedSharesResponse,
    ReportShareItem,
    ReportSharesResponse,
    SentShareItem,
    SentSharesResponse,
    ShareCreatedResponse,
    ShareRequest,
    ShareResponse,
)
from src.services.sharing_service import SharingManager

router = APIRouter(prefix="/sharing", tags=["sharing"])


@router.post("/share", response_model=ShareCreatedResponse, status_code=201)
async def share_report(
    body: ShareRequest,
    identity: Identity = Depends(get_current_identity),
    manager: SharingManager = Depends(get_sharing_manager),
):
    """Give another person read-only access to one of your reports."""
    share = manager.share(body.report_id, identity, body.email)
    return ShareCreatedResponse(
        message="Report shared successfully",
        share_id=share.id,
        share=ShareResponse.model_validate(share),
    )


@router.delete("/share/{share_id}", response_model=MessageResponse)
async def revoke_share(
    share_id: str,
    identity: Identity = Depends(get_current_identity),
    manager: SharingManager = Depends(get_sharing_manager),
):
    manager.revoke(share_id, identity)
    return MessageResponse(message="Access revoked successfully")


@router.get("/received", response_model=ReceivedSharesResponse)
async def list_received(
    identity: Identity = Depends(get_current_identity),
    manager: SharingManager = Depends(get_sharing_manager),
):
    """Reports other people shared with you."""
    rows = manager.list_received(identity)
    return ReceivedSharesResponse(
        reports=[
            ReceivedShareItem(
                share_id=share.id,
                shared_at=share.shared_at,
                owner_name=owner.full_name,
                owner_email=owner.email,
                report=ReportResponse.model_validate(report),
            )
            for share, report, owner in rows
        ]
    )


@router.get("/sent", response_model=SentSharesResponse)
async def list_sent(
    identity: Identity = Depends(get_current_identity),
    manager: SharingManager = Depends(get_sharing_manager),
):
    """Grants you have issued."""
    rows = manager.list_sent(identity)
    return SentSharesResponse(
        shares=[
            SentShareItem(
                **ShareResponse.model_validate(share).model_dump(),
                recipient_name=recipient_name,
                report_title=report.title,
            )
            for share, report, recipient_name in rows
        ]
    )


@router.get("/report/{report_id}", response_model=ReportSharesResponse)
async def list_report_shares(
    report_id: str,
    identity: Identity = Depends(get_current_identity),
    manager: SharingManager = Depends(get_sharing_manager),
):
    """Everyone a report is shared with. Owner only."""
    rows = manager.list_for_report(report_id, identity)
    return ReportSharesResponse(
        shares=[
            ReportShareItem(
                **ShareResponse.model_validate(share).model_dump(),
                recipient_name=recipient_name,
            )
            for share, recipient_name in rows
        ]
    )
