"""
Claim Error Taxonomy

Exceptions raised by the services and translated to responses by the API layer.
"""
from typing import Optional

from .states import ClaimStatus


class ClaimError(Exception):
    """Base class for all expected claim processing failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClaimValidationError(ClaimError):
    """The supporting document was rejected; the user must resubmit."""

    def __init__(self, reason: str):
        super().__init__(f"Supporting document rejected: {reason}")
        self.reason = reason


class ClaimNotFoundError(ClaimError):
    """No claim exists with the requested id."""

    def __init__(self, claim_id: int):
        super().__init__(f"Claim {claim_id} not found")
        self.claim_id = claim_id


class InvalidTransitionError(ClaimError):
    """The requested status change is not allowed from the current status."""

    def __init__(self, claim_id: Optional[int], current: ClaimStatus, requested: ClaimStatus):
        super().__init__(
            f"Cannot transition claim {claim_id} from {current.value} to {requested.value}"
        )
        self.claim_id = claim_id
        self.current = current
        self.requested = requested


class PersistenceError(ClaimError):
    """The backing store or document storage failed. The caller may retry."""


class ClaimConflictError(PersistenceError):
    """A concurrent writer changed the claim first. Retry after refreshing."""

    def __init__(self, claim_id: int, expected: ClaimStatus, actual: ClaimStatus):
        super().__init__(
            f"Claim {claim_id} changed concurrently: expected {expected.value}, found {actual.value}"
        )
        self.claim_id = claim_id
        self.expected = expected
        self.actual = actual
