"""Vital sign operations on top of the record store."""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from ..core.exceptions import NotFoundOrForbidden, ValidationError
from ..core.security import Identity
from ..models import Vital
from ..schemas.vital import VitalTrendFilters
from .access_control import AccessControlEvaluator, Operation
from .record_store import RecordStore

logger = logging.getLogger(__name__)


class VitalsService:
    """Add, list, delete and aggregate vitals. Access goes through the evaluator."""

    def __init__(self, store: RecordStore, access: AccessControlEvaluator):
        self.store = store
        self.access = access

    def add_vital(
        self,
        identity: Identity,
        report_id: str,
        vital_type: Optional[str],
        value: Optional[str],
        unit: Optional[str],
        measured_at: Optional[datetime] = None,
    ) -> Vital:
        """Attach a measurement to one of the requester's own reports."""
        report, _ = self.access.require(identity, report_id, Operation.WRITE)
        vital = self.store.create_vital(report.id, vital_type, value, unit, measured_at)
        logger.info(f"Vital {vital.id} added to report {report.id}")
        return vital

    def list_vitals_for_report(self, report_id: str, identity: Identity) -> List[Vital]:
        report, _ = self.access.require(identity, report_id, Operation.READ)
        return self.store.list_vitals_for_report(report.id)

    def delete_vital(self, vital_id: str, identity: Identity) -> None:
        vital = self.store.get_vital(vital_id)
        if not vital:
            raise NotFoundOrForbidden("Vital")

        try:
            self.access.require(identity, vital.report_id, Operation.DELETE)
        except NotFoundOrForbidden:
            raise NotFoundOrForbidden("Vital")

        if not self.store.delete_vital(vital_id):
            raise NotFoundOrForbidden("Vital")
        logger.info(f"Vital {vital_id} deleted by user {identity.user_id}")

    def vitals_trend(
        self, identity: Identity, filters: VitalTrendFilters
    ) -> List[Tuple[Vital, date]]:
        if (
            filters.start_date
            and filters.end_date
            and filters.start_date > filters.end_date
        ):
            raise ValidationError(
                "start_date must not be after end_date", ["start_date", "end_date"]
            )
        return self.store.vitals_trend(
            identity.user_id,
            vital_type=filters.vital_type,
            start_date=filters.start_date,
            end_date=filters.end_date,
        )

    def vitals_summary(self, identity: Identity) -> List[Dict[str, Any]]:
        return self.store.vitals_summary(identity.user_id)
