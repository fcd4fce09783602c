"""
Claim Lifecycle

Decides which status changes a claim may make. Holds no claims and never persists.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from app.core.states import ClaimStatus


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of asking the lifecycle for a status change."""
    allowed: bool
    current: ClaimStatus
    requested: ClaimStatus
    reason: str = ""

    @property
    def new_status(self) -> Optional[ClaimStatus]:
        return self.requested if self.allowed else None


class ClaimLifecycle:
    """
    State machine for claim review.

    PENDING is the only non-terminal status. Re-requesting the status a
    claim already holds is an invalid transition, not a no-op. Deletion is
    allowed from every status and is not part of the transition table.
    """

    INITIAL_STATUS: ClaimStatus = ClaimStatus.PENDING

    # Define valid transitions (from_status -> set of valid to_statuses)
    TRANSITIONS: Dict[ClaimStatus, Set[ClaimStatus]] = {
        ClaimStatus.PENDING: {ClaimStatus.APPROVED, ClaimStatus.REJECTED},
        ClaimStatus.APPROVED: set(),  # Terminal
        ClaimStatus.REJECTED: set(),  # Terminal
    }

    def get_valid_transitions(self, status: ClaimStatus) -> List[ClaimStatus]:
        """Valid next statuses, in declaration order of ClaimStatus."""
        allowed = self.TRANSITIONS.get(status, set())
        return [s for s in ClaimStatus if s in allowed]

    def can_transition(self, current: ClaimStatus, requested: ClaimStatus) -> bool:
        return requested in self.TRANSITIONS.get(current, set())

    def is_terminal(self, status: ClaimStatus) -> bool:
        return not self.TRANSITIONS.get(status)

    def transition(self, current: ClaimStatus, requested: ClaimStatus) -> TransitionResult:
        """
        Check a requested status change.

        Args:
            current: The status the claim holds now
            requested: The status the caller wants

        Returns:
            TransitionResult with allowed=True, or allowed=False and a reason
            naming the current and requested statuses
        """
        if self.can_transition(current, requested):
            return TransitionResult(allowed=True, current=current, requested=requested)

        if current == requested:
            reason = f"Claim is already {current.value}"
        elif self.is_terminal(current):
            reason = f"Claim is {current.value} (terminal) and cannot become {requested.value}"
        else:
            valid = [s.value for s in self.get_valid_transitions(current)]
            reason = (
                f"Invalid transition from {current.value} to {requested.value}. "
                f"Valid transitions: {valid}"
            )
        return TransitionResult(allowed=False, current=current, requested=requested, reason=reason)
