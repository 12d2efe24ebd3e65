"""Registration and login endpoints."""

from fastapi import APIRouter, Depends

from src.core.config import Settings
from src.core.dependencies import (
    get_current_identity,
    get_identity_service,
    get_report_manager,
    get_settings_dependency,
)
from src.core.security import Identity, create_access_token
from src.schemas.common import MessageResponse
from src.schemas.user import (
    IdentityResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from src.services.identity_service import IdentityService
from src.services.report_service import ReportLifecycleManager

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterRequest,
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings_dependency),
):
    user = service.register_user(body.email, body.password, body.full_name)
    token = create_access_token(service.identity_for(user), settings)
    return TokenResponse(
        message="User registered successfully",
        access_token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings_dependency),
):
    user = service.authenticate(body.email, body.password)
    token = create_access_token(service.identity_for(user), settings)
    return TokenResponse(
        message="Login successful",
        access_token=token,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=IdentityResponse)
async def me(identity: Identity = Depends(get_current_identity)):
    return IdentityResponse(user_id=identity.user_id, email=identity.email)


@router.delete("/me", response_model=MessageResponse)
async def delete_me(
    identity: Identity = Depends(get_current_identity),
    manager: ReportLifecycleManager = Depends(get_report_manager),
):
    """Delete the account, its reports and their files."""
    await manager.delete_account(identity)
    return MessageResponse(message="Account deleted successfully")
