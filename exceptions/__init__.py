"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # CSV import
    CSVParseError,
    MissingColumnsError,

    # Storage
    StorageError,

    # Bulk upload wizard
    WizardSessionNotFoundError,
    InvalidWizardTransitionError,
    WizardStageError,
    NoEligibleProductsError,
    ImageNotFoundError,
)

__all__ = [
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",
    "CSVParseError",
    "MissingColumnsError",
    "StorageError",
    "WizardSessionNotFoundError",
    "InvalidWizardTransitionError",
    "WizardStageError",
    "NoEligibleProductsError",
    "ImageNotFoundError",
]
