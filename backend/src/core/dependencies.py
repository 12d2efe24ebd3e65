"""
Shared dependencies for FastAPI dependency injection.

One engine and one file store per process; one session, record store and
set of services per request.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.core.config import get_settings, Settings
from src.core.database import get_db
from src.core.exceptions import AuthenticationError
from src.core.security import Identity, decode_access_token
from src.services.access_control import AccessControlEvaluator
from src.services.identity_service import IdentityService
from src.services.record_store import RecordStore
from src.services.report_service import ReportLifecycleManager
from src.services.sharing_service import SharingManager
from src.services.storage_service import FileStore, create_file_store
from src.services.vitals_service import VitalsService

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings_dependency() -> Settings:
    """Dependency to get application settings."""
    return get_settings()


@lru_cache()
def get_file_store() -> FileStore:
    """Process-wide file store."""
    return create_file_store(get_settings())


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


def get_access_control(
    store: RecordStore = Depends(get_record_store),
) -> AccessControlEvaluator:
    return AccessControlEvaluator(store)


def get_identity_service(
    store: RecordStore = Depends(get_record_store),
) -> IdentityService:
    return IdentityService(store)


def get_report_manager(
    store: RecordStore = Depends(get_record_store),
    access: AccessControlEvaluator = Depends(get_access_control),
    file_store: FileStore = Depends(get_file_store),
) -> ReportLifecycleManager:
    return ReportLifecycleManager(store, access, file_store)


def get_vitals_service(
    store: RecordStore = Depends(get_record_store),
    access: AccessControlEvaluator = Depends(get_access_control),
) -> VitalsService:
    return VitalsService(store, access)


def get_sharing_manager(
    store: RecordStore = Depends(get_record_store),
    access: AccessControlEvaluator = Depends(get_access_control),
    identities: IdentityService = Depends(get_identity_service),
) -> SharingManager:
    return SharingManager(store, access, identities)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings_dependency),
) -> Identity:
    """Decode the bearer token attached to the request."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return decode_access_token(credentials.credentials, settings)
