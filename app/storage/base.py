"""
Claim Store Interface

Persistence boundary for claim records. No validation lives here.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from app.core.models import Claim
from app.core.states import ClaimStatus


class ClaimStore(ABC):
    """
    Abstract claim persistence.

    Implementations assign ids on create, return copies so that callers
    cannot change stored state without update(), and list claims in
    insertion order.
    """

    @abstractmethod
    def create(self, claim: Claim) -> int:
        """Persist a new claim and return its assigned id."""

    @abstractmethod
    def get_by_id(self, claim_id: int) -> Claim:
        """Return the claim or raise ClaimNotFoundError."""

    @abstractmethod
    def list_by_status(self, status: ClaimStatus) -> List[Claim]:
        """Claims currently holding status, oldest first."""

    @abstractmethod
    def list_all(self) -> List[Claim]:
        """Every stored claim, oldest first."""

    @abstractmethod
    def update(self, claim: Claim, expected_status: Optional[ClaimStatus] = None) -> None:
        """
        Persist the mutable fields of an existing claim.

        Raises ClaimNotFoundError if the id is gone, and ClaimConflictError
        if expected_status is given and the stored status differs.
        """

    @abstractmethod
    def delete(self, claim_id: int) -> None:
        """Remove the claim or raise ClaimNotFoundError."""
