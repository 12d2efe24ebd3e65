"""
Report lifecycle: creating a report with its vitals batch, reading it back,
and deleting it (or a whole account) together with the backing files.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import (
    FatalInconsistencyError,
    NotFoundOrForbidden,
    StorageError,
    ValidationError,
)
from ..core.security import Identity
from ..models import Report, Vital
from ..schemas.report import (
    CreateStatus,
    ReportCreateResult,
    ReportMetadata,
    ReportSearchFilters,
    ReportUpdate,
    VitalFailure,
)
from ..schemas.vital import VitalEntry
from ..utils.file_utils import guess_content_type
from .access_control import AccessControlEvaluator, AccessDecision, Operation
from .record_store import RecordStore, validate_report_fields, validate_vital_fields
from .storage_service import FileStore, RemoveResult

logger = logging.getLogger(__name__)


@dataclass
class ReportView:
    """A report as returned to a permitted requester."""

    report: Report
    vitals: List[Vital]
    decision: AccessDecision


@dataclass
class StoredFile:
    content: bytes
    content_type: str
    filename: str


class ReportLifecycleManager:
    """
    Creates and destroys reports as consistent units.

    Ordering rules:
    - the report row exists before any of its vitals is inserted
    - on delete the file is removed before the row
    """

    def __init__(
        self,
        store: RecordStore,
        access: AccessControlEvaluator,
        file_store: FileStore,
    ):
        self.store = store
        self.access = access
        self.file_store = file_store

    # =========================================================================
    # Create
    # =========================================================================

    def _prepare_vitals(
        self, entries: Optional[List[VitalEntry]], report_date: date
    ) -> Tuple[List[Tuple[int, tuple]], List[VitalFailure]]:
        """
        Validate a vitals batch before anything is written.

        Entries without a timestamp are dated at the report's clinical date.
        """
        prepared = []
        failures = []
        default_measured_at = datetime.combine(report_date, time.min)

        for index, entry in enumerate(entries or []):
            try:
                vital_type, value, unit, measured_at = validate_vital_fields(
                    entry.vital_type, entry.value, entry.unit, entry.measured_at
                )
            except ValidationError as e:
                failures.append(
                    VitalFailure(index=index, vital_type=entry.vital_type, reason=e.message)
                )
                continue
            prepared.append(
                (index, (vital_type, value, unit, measured_at or default_measured_at))
            )

        return prepared, failures

    def create_report(
        self,
        owner_id: str,
        metadata: ReportMetadata,
        file_ref: str,
        file_type: str,
        original_name: Optional[str] = None,
        vitals: Optional[List[VitalEntry]] = None,
    ) -> ReportCreateResult:
        """
        Persist a report for an already stored file, then its vitals.

        Vitals are best-effort: the report is kept even if some of them fail,
        in which case the result status is ``partial`` and lists the failures.

        Raises:
            ValidationError: title, report type or report date missing
        """
        title, report_type, report_date = validate_report_fields(
            metadata.title, metadata.report_type, metadata.report_date
        )
        prepared, failures = self._prepare_vitals(vitals, report_date)

        report = self.store.create_report(
            user_id=owner_id,
            title=title,
            report_type=report_type,
            report_date=report_date,
            file_path=file_ref,
            file_type=file_type,
            notes=metadata.notes,
            original_name=original_name,
        )

        saved = []
        for index, (vital_type, value, unit, measured_at) in prepared:
            try:
                vital = self.store.create_vital(
                    report.id, vital_type, value, unit, measured_at
                )
            except (ValidationError, SQLAlchemyError) as e:
                reason = e.message if isinstance(e, ValidationError) else "Failed to save vital"
                logger.warning(f"Vital {index} of report {report.id} not saved: {e}")
                failures.append(VitalFailure(index=index, vital_type=vital_type, reason=reason))
                continue
            saved.append(vital.id)

        failures.sort(key=lambda f: f.index)
        logger.info(
            f"Report {report.id} created for user {owner_id}: "
            f"{len(saved)} vitals saved, {len(failures)} failed"
        )

        if failures:
            return ReportCreateResult(
                report_id=report.id,
                status=CreateStatus.PARTIAL,
                message="Report uploaded, but some vitals failed to save",
                vitals_saved=saved,
                failed_vitals=failures,
            )
        return ReportCreateResult(
            report_id=report.id,
            status=CreateStatus.CREATED,
            message="Report uploaded successfully",
            vitals_saved=saved,
        )

    async def upload_report(
        self,
        identity: Identity,
        metadata: ReportMetadata,
        content: bytes,
        filename: str,
        content_type: str,
        vitals: Optional[List[VitalEntry]] = None,
    ) -> ReportCreateResult:
        """
        Store an uploaded file and create its report.

        Metadata is validated before the bytes are stored. If the report row
        cannot be written the stored file is removed again.
        """
        validate_report_fields(metadata.title, metadata.report_type, metadata.report_date)

        file_ref = await self.file_store.store(content, filename, content_type)
        try:
            return self.create_report(
                owner_id=identity.user_id,
                metadata=metadata,
                file_ref=file_ref,
                file_type=content_type,
                original_name=filename,
                vitals=vitals,
            )
        except Exception:
            await self._discard_orphan(file_ref)
            raise

    async def _discard_orphan(self, file_ref: str) -> None:
        try:
            await self.file_store.remove(file_ref)
        except StorageError as e:
            logger.error(f"Could not remove orphaned upload {file_ref}: {e}")

    # =========================================================================
    # Read
    # =========================================================================

    def list_reports_for_owner(self, identity: Identity) -> List[Tuple[Report, int]]:
        return self.store.list_reports_for_owner(identity.user_id)

    def search_reports(
        self, identity: Identity, filters: ReportSearchFilters
    ) -> List[Report]:
        if (
            filters.start_date
            and filters.end_date
            and filters.start_date > filters.end_date
        ):
            raise ValidationError(
                "start_date must not be after end_date", ["start_date", "end_date"]
            )

        return self.store.search_reports(
            identity.user_id,
            start_date=filters.start_date,
            end_date=filters.end_date,
            report_type=filters.report_type,
            vital_type=filters.vital_type,
        )

    def list_visible_reports(self, identity: Identity) -> List[Report]:
        """Owned reports together with reports shared with the requester."""
        return self.store.list_visible_reports(identity.email, identity.user_id)

    def get_report(self, report_id: str, identity: Identity) -> ReportView:
        """Report metadata and vitals for an owner or a grantee."""
        report, decision = self.access.require(identity, report_id, Operation.READ)
        vitals = self.store.list_vitals_for_report(report.id)
        return ReportView(report=report, vitals=vitals, decision=decision)

    async def get_report_file(self, report_id: str, identity: Identity) -> StoredFile:
        """Backing file bytes for an owner or a grantee."""
        report, _ = self.access.require(identity, report_id, Operation.READ)

        content = await self.file_store.read(report.file_path)
        if content is None:
            logger.warning(f"File for report {report.id} is missing: {report.file_path}")
            raise NotFoundOrForbidden("File")

        filename = report.original_name or report.file_path.rsplit("/", 1)[-1]
        return StoredFile(
            content=content,
            content_type=report.file_type or guess_content_type(filename),
            filename=filename,
        )

    # =========================================================================
    # Update
    # =========================================================================

    def update_report(
        self, report_id: str, identity: Identity, changes: ReportUpdate
    ) -> Report:
        """
        Edit title, type, clinical date or notes. Owner only.

        Raises:
            NotFoundOrForbidden: missing report or requester is not the owner
            ValidationError: a required field was blanked or the date is invalid
        """
        report, _ = self.access.require(identity, report_id, Operation.WRITE)
        updated = self.store.update_report(
            report.id,
            title=changes.title,
            report_type=changes.report_type,
            report_date=changes.report_date,
            notes=changes.notes,
        )
        if updated is None:
            raise NotFoundOrForbidden("Report")

        logger.info(f"Report {report_id} updated by user {identity.user_id}")
        return updated

    # =========================================================================
    # Delete
    # =========================================================================

    async def delete_report(self, report_id: str, identity: Identity) -> None:
        """
        Delete a report, its file, vitals and share grants. Owner only.

        Raises:
            NotFoundOrForbidden: missing report or requester is not the owner
            StorageError: the file could not be removed; nothing was deleted
            FatalInconsistencyError: the file is gone but the row remains
        """
        report, _ = self.access.require(identity, report_id, Operation.DELETE)
        await self._remove_report(report)
        logger.info(f"Report {report_id} deleted by user {identity.user_id}")

    async def delete_account(self, identity: Identity) -> None:
        """
        Delete the requester's account with every report they own.

        Each report goes through the same file-then-row removal as
        ``delete_report``, so no uploaded file outlives its row. Grants the
        user received are detached, not deleted.

        Raises:
            NotFoundOrForbidden: the account no longer exists
            StorageError: a file could not be removed; that report and the
                account are kept
            FatalInconsistencyError: a file is gone but its report row remains
        """
        if self.store.get_user(identity.user_id) is None:
            raise NotFoundOrForbidden("User")

        owned = self.store.list_reports_for_owner(identity.user_id)
        for report, _ in owned:
            await self._remove_report(report)

        if not self.store.delete_user(identity.user_id):
            raise NotFoundOrForbidden("User")

        logger.info(
            f"Account {identity.user_id} deleted with {len(owned)} reports"
        )

    async def _remove_report(self, report: Report) -> None:
        report_id = report.id
        file_ref = report.file_path

        outcome = await self.file_store.remove(file_ref)
        if outcome == RemoveResult.ALREADY_ABSENT:
            logger.warning(f"Report {report_id} had no file at {file_ref}")

        try:
            deleted = self.store.delete_report(report_id)
        except SQLAlchemyError as e:
            logger.critical(
                f"INCONSISTENT STORAGE: file {file_ref} removed but report "
                f"{report_id} could not be deleted: {e}"
            )
            raise FatalInconsistencyError(report_id, file_ref, str(e)) from e

        if not deleted:
            # removed by a concurrent request between the check and the delete
            raise NotFoundOrForbidden("Report")
