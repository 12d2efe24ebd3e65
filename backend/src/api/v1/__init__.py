"""
API v1 routes aggregation.
"""

from fastapi import APIRouter
from src.api.v1.auth import router as auth_router
from src.api.v1.reports import router as reports_router
from src.api.v1.vitals import router as vitals_router
from src.api.v1.sharing import router as sharing_router

router = APIRouter(prefix="/v1")

# Include sub-routers
router.include_router(auth_router)
router.include_router(reports_router)
router.include_router(vitals_router)
router.include_router(sharing_router)
