# Services module - validation, submission and review
from .validator import ValidationResult, validate_attachment
from .submission import SubmissionService
from .review import ReviewService

__all__ = ["ValidationResult", "validate_attachment", "SubmissionService", "ReviewService"]
