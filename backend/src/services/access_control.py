"""
Access control for reports.

The evaluator is the only place that decides whether an identity may read,
modify, delete or reshare a report. Every read and delete path calls it
before any report data, vitals or file bytes leave the core.

Rules:
- the owner may do everything
- a grant matching the requester's email OR user id allows ``read`` only
- anything else, including a report that does not exist, is denied
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from ..core.exceptions import NotFoundOrForbidden
from ..core.security import Identity
from ..models import Report
from .record_store import RecordStore

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    SHARE = "share"


class Capability(str, Enum):
    OWNER = "owner"
    SHARED_READ_ONLY = "shared_read_only"


CAPABILITY_OPERATIONS = {
    Capability.OWNER: frozenset(Operation),
    Capability.SHARED_READ_ONLY: frozenset({Operation.READ}),
}


@dataclass(frozen=True)
class AccessDecision:
    """Result of an access check."""

    permitted: bool
    capability: Optional[Capability] = None

    @property
    def operations(self) -> FrozenSet[Operation]:
        if not self.capability:
            return frozenset()
        return CAPABILITY_OPERATIONS[self.capability]

    @property
    def is_owner(self) -> bool:
        return self.capability == Capability.OWNER


DENIED = AccessDecision(permitted=False)


class AccessControlEvaluator:
    """Decides (identity, report, operation) triples."""

    def __init__(self, store: RecordStore):
        self.store = store

    def capability_for(
        self, identity: Identity, report: Report
    ) -> Optional[Capability]:
        """Effective capability of an identity on an already-fetched report."""
        if report.user_id == identity.user_id:
            return Capability.OWNER

        # grants may predate the recipient's account (email only) or be
        # resolved to a user id, so both keys are checked every time
        grant = self.store.find_grant_for(report.id, identity.email, identity.user_id)
        if grant:
            return Capability.SHARED_READ_ONLY
        return None

    def evaluate(
        self, identity: Identity, report_id: str, operation: Operation
    ) -> Tuple[Optional[Report], AccessDecision]:
        """
        Check an operation and return the report alongside the decision.

        The report is only returned when the operation is permitted.
        """
        report = self.store.get_report(report_id)
        if not report:
            return None, DENIED

        capability = self.capability_for(identity, report)
        if capability is None or operation not in CAPABILITY_OPERATIONS[capability]:
            return None, DENIED

        return report, AccessDecision(permitted=True, capability=capability)

    def permit(self, identity: Identity, report_id: str, operation: Operation) -> bool:
        _, decision = self.evaluate(identity, report_id, operation)
        return decision.permitted

    def require(
        self, identity: Identity, report_id: str, operation: Operation
    ) -> Tuple[Report, AccessDecision]:
        """
        Like ``evaluate`` but raises on denial.

        Raises:
            NotFoundOrForbidden: the report is missing or the operation denied
        """
        report, decision = self.evaluate(identity, report_id, operation)
        if not decision.permitted:
            logger.info(
                f"Denied {operation.value} on report {report_id} for user {identity.user_id}"
            )
            raise NotFoundOrForbidden("Report")
        return report, decision
