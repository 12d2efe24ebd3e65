"""Record store: persistence of users, reports, vitals and share grants."""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from ..core.exceptions import ConflictError, NotFoundOrForbidden, ValidationError
from ..models import Report, ShareGrant, User, Vital
from ..utils.normalization import (
    normalize_email,
    normalize_text,
    parse_date,
    parse_datetime,
)

logger = logging.getLogger(__name__)


def _require_fields(entity: str, **fields: Any) -> None:
    """Raise ValidationError naming every blank field."""
    missing = [name for name, value in fields.items() if value is None]
    if missing:
        raise ValidationError(
            f"{entity}: {', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
            fields=missing,
        )


def validate_report_fields(
    title: Optional[str], report_type: Optional[str], report_date: Any
) -> Tuple[str, str, date]:
    """Normalize and check the required report metadata."""
    title = normalize_text(title)
    report_type = normalize_text(report_type)
    try:
        report_date = parse_date(report_date)
    except ValueError:
        raise ValidationError("Report date is not a valid date", ["report_date"])

    _require_fields(
        "Report", title=title, report_type=report_type, report_date=report_date
    )
    return title, report_type, report_date


def validate_vital_fields(
    vital_type: Optional[str],
    value: Optional[str],
    unit: Optional[str],
    measured_at: Any = None,
) -> Tuple[str, str, str, Optional[datetime]]:
    """Normalize and check one measurement. A missing timestamp stays None."""
    vital_type = normalize_text(vital_type)
    value = normalize_text(value)
    unit = normalize_text(unit)
    _require_fields("Vital", vital_type=vital_type, value=value, unit=unit)

    try:
        measured_at = parse_datetime(measured_at)
    except ValueError:
        raise ValidationError("Measurement time is not a valid timestamp", ["measured_at"])
    return vital_type, value, unit, measured_at


class RecordStore:
    """
    Durable storage for the four entities with referential integrity.

    Every write commits on its own; a failed write is rolled back before the
    error propagates so the session stays usable. Ownership and sharing rules
    are not checked here, see ``AccessControlEvaluator``.
    """

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    # =========================================================================
    # Users
    # =========================================================================

    def create_user(self, email: str, password_hash: str, full_name: str) -> User:
        """Create a new user. Duplicate emails raise ConflictError."""
        email = normalize_email(email)
        full_name = normalize_text(full_name)
        _require_fields(
            "User", email=email, password_hash=password_hash, full_name=full_name
        )

        user = User(email=email, password_hash=password_hash, full_name=full_name)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Email already registered")
        self.db.refresh(user)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        if not email:
            return None
        return self.db.query(User).filter(User.email == email).first()

    def delete_user(self, user_id: str) -> bool:
        """
        Delete an account together with its reports and the grants it issued.

        Grants addressed to the account survive as email-only grants. Only
        rows are removed here; ReportLifecycleManager.delete_account removes
        the uploaded files first.
        """
        user = self.get_user(user_id)
        if not user:
            return False

        try:
            # User.shares_received has no delete cascade: the ORM nulls
            # shared_with_user_id on those grants instead of removing them
            self.db.delete(user)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return True

    # =========================================================================
    # Reports
    # =========================================================================

    def create_report(
        self,
        user_id: str,
        title: Optional[str],
        report_type: Optional[str],
        report_date: Any,
        file_path: Optional[str],
        file_type: Optional[str],
        notes: Optional[str] = None,
        original_name: Optional[str] = None,
    ) -> Report:
        """Create a new report record."""
        title, report_type, report_date = validate_report_fields(
            title, report_type, report_date
        )
        _require_fields("Report", file_path=file_path, file_type=file_type)

        report = Report(
            user_id=user_id,
            title=title,
            report_type=report_type,
            report_date=report_date,
            file_path=file_path,
            file_type=file_type,
            original_name=original_name,
            notes=normalize_text(notes),
            upload_date=datetime.utcnow(),
        )
        self.db.add(report)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(report)
        return report

    def get_report(self, report_id: str) -> Optional[Report]:
        """Get report by ID."""
        return self.db.query(Report).filter(Report.id == report_id).first()

    def list_reports_for_owner(self, user_id: str) -> List[Tuple[Report, int]]:
        """Reports owned by a user with their vital counts, newest report date first."""
        vital_count = (
            self.db.query(func.count(Vital.id))
            .filter(Vital.report_id == Report.id)
            .correlate(Report)
            .scalar_subquery()
        )
        rows = (
            self.db.query(Report, vital_count)
            .filter(Report.user_id == user_id)
            .order_by(desc(Report.report_date), desc(Report.upload_date))
            .all()
        )
        return [(report, count or 0) for report, count in rows]

    def search_reports(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        report_type: Optional[str] = None,
        vital_type: Optional[str] = None,
    ) -> List[Report]:
        """Filter a user's reports by date range, report type and vital type."""
        query = self.db.query(Report).filter(Report.user_id == user_id)

        if vital_type:
            matching = select(Vital.report_id).where(Vital.vital_type == vital_type)
            query = query.filter(Report.id.in_(matching))

        if start_date:
            query = query.filter(Report.report_date >= start_date)

        if end_date:
            query = query.filter(Report.report_date <= end_date)

        if report_type:
            query = query.filter(Report.report_type == report_type)

        return query.order_by(desc(Report.report_date), desc(Report.upload_date)).all()

    def list_visible_reports(
        self, email: Optional[str], user_id: str
    ) -> List[Report]:
        """Reports an identity owns or holds a grant on, newest report date first."""
        grant_conditions = [ShareGrant.shared_with_user_id == user_id]
        email = normalize_email(email)
        if email:
            grant_conditions.append(ShareGrant.shared_with_email == email)
        granted = select(ShareGrant.report_id).where(or_(*grant_conditions))

        return (
            self.db.query(Report)
            .filter(or_(Report.user_id == user_id, Report.id.in_(granted)))
            .order_by(desc(Report.report_date), desc(Report.upload_date))
            .all()
        )

    def update_report(
        self,
        report_id: str,
        title: Optional[str] = None,
        report_type: Optional[str] = None,
        report_date: Any = None,
        notes: Optional[str] = None,
    ) -> Optional[Report]:
        """
        Change report metadata. Fields passed as None keep their value.

        The owner and the backing file never change.
        """
        report = self.get_report(report_id)
        if not report:
            return None

        title, report_type, report_date = validate_report_fields(
            report.title if title is None else title,
            report.report_type if report_type is None else report_type,
            report.report_date if report_date is None else report_date,
        )
        report.title = title
        report.report_type = report_type
        report.report_date = report_date
        if notes is not None:
            report.notes = normalize_text(notes)

        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(report)
        return report

    def delete_report(self, report_id: str) -> bool:
        """
        Delete a report with all of its vitals and share grants.

        Runs as a single transaction: either every row goes or none does.
        """
        report = self.get_report(report_id)
        if not report:
            return False

        try:
            # vitals and shares go through the relationship cascade
            self.db.delete(report)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return True

    # =========================================================================
    # Vitals
    # =========================================================================

    def create_vital(
        self,
        report_id: str,
        vital_type: Optional[str],
        value: Optional[str],
        unit: Optional[str],
        measured_at: Any = None,
    ) -> Vital:
        """Attach one measurement to an existing report."""
        vital_type, value, unit, measured_at = validate_vital_fields(
            vital_type, value, unit, measured_at
        )

        if not self.get_report(report_id):
            raise ValidationError("Vital references a report that does not exist", ["report_id"])

        last_order = self.db.query(func.max(Vital.entry_order)).scalar()
        vital = Vital(
            report_id=report_id,
            vital_type=vital_type,
            value=value,
            unit=unit,
            measured_at=measured_at or datetime.utcnow(),
            entry_order=(last_order or 0) + 1,
        )
        self.db.add(vital)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(vital)
        return vital

    def get_vital(self, vital_id: str) -> Optional[Vital]:
        return self.db.query(Vital).filter(Vital.id == vital_id).first()

    def list_vitals_for_report(self, report_id: str) -> List[Vital]:
        """Vitals of a report, most recent measurement first."""
        return (
            self.db.query(Vital)
            .filter(Vital.report_id == report_id)
            .order_by(desc(Vital.measured_at), desc(Vital.entry_order))
            .all()
        )

    def delete_vital(self, vital_id: str) -> bool:
        vital = self.get_vital(vital_id)
        if not vital:
            return False
        try:
            self.db.delete(vital)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return True

    def vitals_trend(
        self,
        user_id: str,
        vital_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Tuple[Vital, date]]:
        """A user's vitals in measurement order, each with its report's date."""
        query = (
            self.db.query(Vital, Report.report_date)
            .join(Report, Vital.report_id == Report.id)
            .filter(Report.user_id == user_id)
        )

        if vital_type:
            query = query.filter(Vital.vital_type == vital_type)

        if start_date:
            query = query.filter(Report.report_date >= start_date)

        if end_date:
            query = query.filter(Report.report_date <= end_date)

        return [tuple(row) for row in query.order_by(Vital.measured_at, Vital.entry_order).all()]

    def vitals_summary(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Group a user's vitals by (type, unit).

        Each entry has the measurement count, the value of the most recent
        measurement and its timestamp. Entries are ordered by that timestamp,
        most recent first.
        """
        rows = (
            self.db.query(Vital)
            .join(Report, Vital.report_id == Report.id)
            .filter(Report.user_id == user_id)
            .order_by(Vital.measured_at, Vital.entry_order)
            .all()
        )

        groups: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for vital in rows:
            key = (vital.vital_type, vital.unit)
            entry = groups.setdefault(
                key,
                {"vital_type": vital.vital_type, "unit": vital.unit, "count": 0},
            )
            entry["count"] += 1
            # rows are ascending, so the last one seen is the latest
            entry["latest_value"] = vital.value
            entry["latest_measurement"] = vital.measured_at

        return sorted(
            groups.values(), key=lambda e: e["latest_measurement"], reverse=True
        )

    # =========================================================================
    # Share grants
    # =========================================================================

    def create_share(
        self,
        report_id: str,
        shared_by: str,
        shared_with_email: str,
        shared_with_user_id: Optional[str] = None,
    ) -> ShareGrant:
        """
        Persist a grant.

        The (report_id, shared_with_email) unique constraint is the final word
        on duplicates; a violation surfaces as ConflictError. A grant for a
        report that no longer exists surfaces as NotFoundOrForbidden.
        """
        shared_with_email = normalize_email(shared_with_email)
        _require_fields("Share", report_id=report_id, email=shared_with_email)

        share = ShareGrant(
            report_id=report_id,
            shared_by=shared_by,
            shared_with_email=shared_with_email,
            shared_with_user_id=shared_with_user_id,
            access_level="read",
            shared_at=datetime.utcnow(),
        )
        self.db.add(share)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self.get_report(report_id) is None:
                raise NotFoundOrForbidden("Report")
            existing = (
                self.db.query(ShareGrant)
                .filter(
                    ShareGrant.report_id == report_id,
                    ShareGrant.shared_with_email == shared_with_email,
                )
                .first()
            )
            if existing is not None:
                raise ConflictError("Report already shared with this user")
            raise
        self.db.refresh(share)
        return share

    def get_share(self, share_id: str) -> Optional[ShareGrant]:
        return self.db.query(ShareGrant).filter(ShareGrant.id == share_id).first()

    def find_share(self, report_id: str, email: str) -> Optional[ShareGrant]:
        """Grant for an exact (report, recipient email) pair."""
        return (
            self.db.query(ShareGrant)
            .filter(
                ShareGrant.report_id == report_id,
                ShareGrant.shared_with_email == normalize_email(email),
            )
            .first()
        )

    def find_grant_for(
        self, report_id: str, email: Optional[str], user_id: Optional[str]
    ) -> Optional[ShareGrant]:
        """Any grant on the report matching the email OR the resolved user id."""
        conditions = []
        email = normalize_email(email)
        if email:
            conditions.append(ShareGrant.shared_with_email == email)
        if user_id:
            conditions.append(ShareGrant.shared_with_user_id == user_id)
        if not conditions:
            return None

        return (
            self.db.query(ShareGrant)
            .filter(ShareGrant.report_id == report_id, or_(*conditions))
            .first()
        )

    def delete_share(self, share_id: str) -> bool:
        share = self.get_share(share_id)
        if not share:
            return False
        try:
            self.db.delete(share)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return True

    def list_received_shares(
        self, email: Optional[str], user_id: Optional[str]
    ) -> List[Tuple[ShareGrant, Report, User]]:
        """Grants addressed to an identity, with the report and its owner."""
        conditions = []
        email = normalize_email(email)
        if email:
            conditions.append(ShareGrant.shared_with_email == email)
        if user_id:
            conditions.append(ShareGrant.shared_with_user_id == user_id)
        if not conditions:
            return []

        rows = (
            self.db.query(ShareGrant, Report, User)
            .join(Report, ShareGrant.report_id == Report.id)
            .join(User, Report.user_id == User.id)
            .filter(or_(*conditions))
            .order_by(desc(ShareGrant.shared_at))
            .all()
        )
        return [tuple(row) for row in rows]

    def list_sent_shares(
        self, user_id: str
    ) -> List[Tuple[ShareGrant, Report, Optional[str]]]:
        """Grants issued by a user, with the report and the recipient's name if known."""
        recipient = aliased(User)
        rows = (
            self.db.query(ShareGrant, Report, recipient.full_name)
            .join(Report, ShareGrant.report_id == Report.id)
            .outerjoin(recipient, ShareGrant.shared_with_user_id == recipient.id)
            .filter(ShareGrant.shared_by == user_id)
            .order_by(desc(ShareGrant.shared_at))
            .all()
        )
        return [tuple(row) for row in rows]

    def list_shares_for_report(
        self, report_id: str
    ) -> List[Tuple[ShareGrant, Optional[str]]]:
        """Every grant on a report, with the recipient's name if known."""
        rows = (
            self.db.query(ShareGrant, User.full_name)
            .outerjoin(User, ShareGrant.shared_with_user_id == User.id)
            .filter(ShareGrant.report_id == report_id)
            .order_by(desc(ShareGrant.shared_at))
            .all()
        )
        return [tuple(row) for row in rows]
