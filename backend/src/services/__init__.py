"""
Services package initialization.
"""

from src.services.record_store import RecordStore
from src.services.access_control import (
    AccessControlEvaluator,
    AccessDecision,
    Capability,
    Operation,
)
from src.services.identity_service import IdentityService
from src.services.report_service import ReportLifecycleManager
from src.services.sharing_service import SharingManager
from src.services.storage_service import (
    FileStore,
    GCSFileStore,
    LocalFileStore,
    RemoveResult,
)
from src.services.vitals_service import VitalsService

__all__ = [
    "RecordStore",
    "AccessControlEvaluator",
    "AccessDecision",
    "Capability",
    "Operation",
    "IdentityService",
    "ReportLifecycleManager",
    "SharingManager",
    "FileStore",
    "GCSFileStore",
    "LocalFileStore",
    "RemoveResult",
    "VitalsService",
]
