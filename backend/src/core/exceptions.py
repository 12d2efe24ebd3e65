"""
Error taxonomy for the record vault.

Every failure the core can signal is one of these types. The API layer maps
them onto HTTP responses through ``health_wallet_exception_handler``.
"""

from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class HealthWalletError(Exception):
    """
    Base exception for the Health Wallet backend.

    Carries a human-readable message, a machine-readable code and the HTTP
    status the transport layer should answer with.
    """

    def __init__(
        self,
        message: str,
        code: str = "HEALTH_WALLET_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(HealthWalletError):
    """A required field is missing or malformed."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details={"fields": fields} if fields else None,
        )
        self.fields = fields or []


class NotFoundOrForbidden(HealthWalletError):
    """
    The resource does not exist or the requester may not touch it.

    The two cases are indistinguishable and the message is
    always generic.
    """

    def __init__(self, resource: str = "Report"):
        super().__init__(
            message=f"{resource} not found or access denied",
            code="NOT_FOUND_OR_FORBIDDEN",
            status_code=404,
        )


class ConflictError(HealthWalletError):
    """Uniqueness violation (duplicate email, duplicate share grant)."""

    def __init__(self, message: str):
        super().__init__(message=message, code="CONFLICT", status_code=409)


class StorageError(HealthWalletError):
    """The file store failed for a reason other than an already-absent file."""

    def __init__(self, message: str, file_ref: Optional[str] = None):
        super().__init__(
            message=message,
            code="STORAGE_ERROR",
            status_code=500,
            details={"file_ref": file_ref} if file_ref else None,
        )


class FatalInconsistencyError(HealthWalletError):
    """
    A post-condition was violated and storage no longer matches metadata.

    Raised when a report's file has been removed but its row could not be
    deleted. Requires manual reconciliation; never retried.
    """

    def __init__(self, report_id: str, file_ref: str, error: str):
        super().__init__(
            message="Report file was removed but its record could not be deleted",
            code="FATAL_INCONSISTENCY",
            status_code=500,
            details={"report_id": report_id, "file_ref": file_ref, "error": error},
        )
        self.report_id = report_id
        self.file_ref = file_ref


class AuthenticationError(HealthWalletError):
    """Missing, invalid or expired credentials."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, code="AUTHENTICATION_ERROR", status_code=401)


# =============================================================================
# Exception Handlers
# =============================================================================


async def health_wallet_exception_handler(
    request: Request, exc: HealthWalletError
) -> JSONResponse:
    """Convert HealthWalletError to JSON response."""
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_dict(), headers=headers
    )
