"""
In-Memory Claim Store

Dictionary backed store for tests and single-process deployments.
"""
import logging
import threading
from typing import Dict, List, Optional

from app.core.errors import ClaimConflictError, ClaimNotFoundError
from app.core.models import Claim
from app.core.states import ClaimStatus
from app.storage.base import ClaimStore

logger = logging.getLogger(__name__)


class InMemoryClaimStore(ClaimStore):
    """ClaimStore keeping deep copies of claims in an insertion-ordered dict."""

    def __init__(self):
        self._claims: Dict[int, Claim] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, claim: Claim) -> int:
        with self._lock:
            claim_id = self._next_id
            self._next_id += 1
            self._claims[claim_id] = claim.model_copy(update={"id": claim_id}, deep=True)
        logger.debug(f"Stored claim {claim_id}")
        return claim_id

    def get_by_id(self, claim_id: int) -> Claim:
        with self._lock:
            claim = self._claims.get(claim_id)
            if claim is None:
                raise ClaimNotFoundError(claim_id)
            return claim.model_copy(deep=True)

    def list_by_status(self, status: ClaimStatus) -> List[Claim]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._claims.values() if c.status == status]

    def list_all(self) -> List[Claim]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._claims.values()]

    def update(self, claim: Claim, expected_status: Optional[ClaimStatus] = None) -> None:
        with self._lock:
            stored = self._claims.get(claim.id)
            if stored is None:
                raise ClaimNotFoundError(claim.id)
            if expected_status is not None and stored.status != expected_status:
                raise ClaimConflictError(claim.id, expected_status, stored.status)
            # id and created_at never change after creation
            self._claims[claim.id] = claim.model_copy(
                update={"created_at": stored.created_at},
                deep=True
            )

    def delete(self, claim_id: int) -> None:
        with self._lock:
            if self._claims.pop(claim_id, None) is None:
                raise ClaimNotFoundError(claim_id)
        logger.debug(f"Removed claim {claim_id}")
