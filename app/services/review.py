"""
Claim Review Service

Approves, rejects and deletes existing claims, and serves the read-only views.
"""
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from app.core.errors import InvalidTransitionError
from app.core.models import Claim
from app.core.states import ClaimStatus
from app.state_machine.machine import ClaimLifecycle
from app.storage.base import ClaimStore
from app.storage.documents import DocumentStorage

logger = logging.getLogger(__name__)

DEFAULT_REVIEWER = "Administrator"


@dataclass
class _ClaimLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class ReviewService:
    """
    Review operations over a single claim at a time.

    Every write is a fetch -> check -> persist sequence held under a lock
    for that claim id, so two reviewers acting on the same claim are
    serialized while different claims proceed in parallel. The store's
    compare-and-swap on status still guards writers in other processes.
    """

    def __init__(
        self,
        store: ClaimStore,
        documents: Optional[DocumentStorage] = None,
        lifecycle: Optional[ClaimLifecycle] = None
    ):
        self.store = store
        self.documents = documents
        self.lifecycle = lifecycle or ClaimLifecycle()
        self._locks: Dict[int, _ClaimLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _claim_lock(self, claim_id: int) -> Iterator[None]:
        """
        Hold the lock for claim_id.

        Entries are counted by holders and waiters and dropped when the last
        one leaves, so only ids with work in flight keep a lock.
        """
        with self._locks_guard:
            entry = self._locks.get(claim_id)
            if entry is None:
                entry = self._locks[claim_id] = _ClaimLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[claim_id]

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get(self, claim_id: int) -> Claim:
        return self.store.get_by_id(claim_id)

    def list_pending(self) -> List[Claim]:
        return self.store.list_by_status(ClaimStatus.PENDING)

    def track(self, status: Optional[ClaimStatus] = None) -> List[Claim]:
        """All claims, or only those holding status."""
        if status is None:
            return self.store.list_all()
        return self.store.list_by_status(status)

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    def approve(self, claim_id: int, actor: str = DEFAULT_REVIEWER, reason: str = "") -> Claim:
        return self._change_status(claim_id, ClaimStatus.APPROVED, "APPROVED", actor, reason)

    def reject(self, claim_id: int, actor: str = DEFAULT_REVIEWER, reason: str = "") -> Claim:
        return self._change_status(claim_id, ClaimStatus.REJECTED, "REJECTED", actor, reason)

    def _change_status(
        self,
        claim_id: int,
        requested: ClaimStatus,
        action: str,
        actor: str,
        reason: str
    ) -> Claim:
        """
        Move a claim to requested if the lifecycle allows it.

        Raises:
            ClaimNotFoundError: If the claim does not exist
            InvalidTransitionError: If the claim is not PENDING
            PersistenceError: If the store fails or a concurrent writer won
        """
        with self._claim_lock(claim_id):
            claim = self.store.get_by_id(claim_id)

            result = self.lifecycle.transition(claim.status, requested)
            if not result.allowed:
                logger.warning(f"Claim {claim_id}: {result.reason}")
                raise InvalidTransitionError(claim_id, result.current, result.requested)

            previous = claim.status
            claim.record_status_change(result.new_status, actor=actor, action=action, reason=reason)
            self.store.update(claim, expected_status=previous)

        logger.info(f"Claim {claim_id} {action.lower()} by {actor}: {previous.value} -> {claim.status.value}")
        return claim

    def delete(self, claim_id: int) -> Claim:
        """
        Delete a claim in any status.

        Returns:
            The claim as it was before removal

        Raises:
            ClaimNotFoundError: If the claim does not exist (including a second delete)
        """
        with self._claim_lock(claim_id):
            claim = self.store.get_by_id(claim_id)
            self.store.delete(claim_id)

        logger.info(f"Deleted claim {claim_id} (was {claim.status.value})")

        if self.documents is not None:
            # The record is gone already; a leftover file is only logged
            try:
                self.documents.delete(claim.supporting_document)
            except (OSError, ValueError) as e:
                logger.warning(
                    f"Could not remove document {claim.supporting_document} of claim {claim_id}: {e}"
                )
        return claim
