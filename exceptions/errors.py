"""
Custom exception classes for the application.

Row-level validation problems are NOT exceptions; they are collected on
each parsed product. These classes cover import-blocking failures,
wizard misuse, and infrastructure errors.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "CSV_PARSE_ERROR")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# CSV IMPORT ERRORS
# ===================

class CSVParseError(ValidationError):
    """CSV file could not be read (wrong type, bad encoding, empty)."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="CSV_PARSE_ERROR",
            message=message,
            details=details
        )


class MissingColumnsError(ValidationError):
    """CSV header lacks one or more required columns."""

    def __init__(self, missing: list[str]):
        super().__init__(
            code="CSV_MISSING_COLUMNS",
            message=f"Missing required columns: {', '.join(missing)}",
            details={"missing": missing}
        )


# ===================
# STORAGE ERRORS
# ===================

class StorageError(ExternalServiceError):
    """Object storage upload failed."""

    def __init__(self, path: str, message: str):
        super().__init__(
            service="storage",
            message=f"Failed to store {path}: {message}",
            details={"path": path}
        )


# ===================
# BULK UPLOAD WIZARD ERRORS
# ===================

class WizardSessionNotFoundError(NotFoundError):
    """Bulk upload session missing or expired."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Bulk upload session",
            identifier=session_id,
            code="WIZARD_SESSION_NOT_FOUND"
        )


class InvalidWizardTransitionError(ConflictError):
    """Requested wizard step is not allowed from the current step."""

    def __init__(self, current_stage: str, new_stage: str):
        super().__init__(
            code="INVALID_WIZARD_TRANSITION",
            message=f"Cannot move from {current_stage} to {new_stage}",
            details={
                "current_stage": current_stage,
                "new_stage": new_stage
            }
        )


class WizardStageError(ConflictError):
    """Action is not available in the current wizard step."""

    def __init__(self, action: str, current_stage: str, expected_stage: str):
        super().__init__(
            code="WIZARD_STAGE_MISMATCH",
            message=f"Cannot {action} during the {current_stage} step",
            details={
                "action": action,
                "current_stage": current_stage,
                "expected_stage": expected_stage
            }
        )


class NoEligibleProductsError(ValidationError):
    """Upload requested with zero error-free products."""

    def __init__(self):
        super().__init__(
            code="NO_VALID_PRODUCTS",
            message="No valid products to upload"
        )


class ImageNotFoundError(NotFoundError):
    """No pending image at (slug, index)."""

    def __init__(self, slug: str, index: int):
        super().__init__(
            resource="Image",
            identifier=f"{slug}/{index}",
            code="IMAGE_NOT_FOUND"
        )
