# Core module - statuses, models, errors and settings
from .states import ClaimStatus
from .models import Attachment, AuditLogEntry, Claim, ClaimCreate
from .errors import (
    ClaimConflictError,
    ClaimError,
    ClaimNotFoundError,
    ClaimValidationError,
    InvalidTransitionError,
    PersistenceError,
)
from .config import Settings

__all__ = [
    "ClaimStatus",
    "Attachment",
    "AuditLogEntry",
    "Claim",
    "ClaimCreate",
    "ClaimError",
    "ClaimConflictError",
    "ClaimNotFoundError",
    "ClaimValidationError",
    "InvalidTransitionError",
    "PersistenceError",
    "Settings",
]
