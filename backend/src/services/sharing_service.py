"""
Sharing manager: read-only grants from a report's owner to a recipient email.
"""

import logging
from typing import List, Optional, Tuple

from ..core.exceptions import ConflictError, NotFoundOrForbidden, ValidationError
from ..core.security import Identity
from ..models import Report, ShareGrant, User
from ..utils.normalization import is_valid_email, normalize_email
from .access_control import AccessControlEvaluator, Operation
from .identity_service import IdentityService
from .record_store import RecordStore

logger = logging.getLogger(__name__)


class SharingManager:
    """Creates, revokes and lists share grants."""

    def __init__(
        self,
        store: RecordStore,
        access: AccessControlEvaluator,
        identities: IdentityService,
    ):
        self.store = store
        self.access = access
        self.identities = identities

    def share(
        self, report_id: str, identity: Identity, recipient_email: str
    ) -> ShareGrant:
        """
        Grant read access on a report to an email address.

        If the email belongs to an account its user id is stored with the
        grant; otherwise the grant is email-only and takes effect once someone
        with that email signs in.

        Raises:
            ValidationError: missing/malformed email, or sharing with oneself
            NotFoundOrForbidden: report missing or requester is not the owner
            ConflictError: the report is already shared with this email
        """
        email = normalize_email(recipient_email)
        if not report_id or not email:
            raise ValidationError("Report ID and email are required", ["report_id", "email"])
        if not is_valid_email(email):
            raise ValidationError("Email address is not valid", ["email"])

        report, _ = self.access.require(identity, report_id, Operation.SHARE)

        if email == identity.email:
            raise ValidationError("You cannot share a report with yourself", ["email"])

        if self.store.find_share(report.id, email):
            raise ConflictError("Report already shared with this user")

        recipient_id = self.identities.resolve_email_to_user_id(email)
        if recipient_id == identity.user_id:
            raise ValidationError("You cannot share a report with yourself", ["email"])

        # a concurrent share of the same pair loses on the unique constraint
        share = self.store.create_share(
            report_id=report.id,
            shared_by=identity.user_id,
            shared_with_email=email,
            shared_with_user_id=recipient_id,
        )
        logger.info(
            f"Report {report.id} shared by {identity.user_id} with {email} "
            f"({'registered' if recipient_id else 'unregistered'})"
        )
        return share

    def revoke(self, share_id: str, identity: Identity) -> None:
        """
        Remove a grant. Only the user who issued it may revoke it.

        Raises:
            NotFoundOrForbidden: no such grant issued by the requester
        """
        share = self.store.get_share(share_id)
        if not share or share.shared_by != identity.user_id:
            raise NotFoundOrForbidden("Share")

        if not self.store.delete_share(share_id):
            raise NotFoundOrForbidden("Share")
        logger.info(f"Share {share_id} revoked by user {identity.user_id}")

    def list_received(self, identity: Identity) -> List[Tuple[ShareGrant, Report, User]]:
        return self.store.list_received_shares(identity.email, identity.user_id)

    def list_sent(
        self, identity: Identity
    ) -> List[Tuple[ShareGrant, Report, Optional[str]]]:
        return self.store.list_sent_shares(identity.user_id)

    def list_for_report(
        self, report_id: str, identity: Identity
    ) -> List[Tuple[ShareGrant, Optional[str]]]:
        """All grants on a report. Owner only."""
        report, _ = self.access.require(identity, report_id, Operation.SHARE)
        return self.store.list_shares_for_report(report.id)
