import pytest

from app.core.states import ClaimStatus
from app.state_machine.machine import ClaimLifecycle


@pytest.fixture
def lifecycle():
    return ClaimLifecycle()


@pytest.mark.parametrize("target", [ClaimStatus.APPROVED, ClaimStatus.REJECTED])
def test_pending_claims_can_be_decided(lifecycle: ClaimLifecycle, target: ClaimStatus) -> None:
    result = lifecycle.transition(ClaimStatus.PENDING, target)
    assert result.allowed
    assert result.new_status == target


@pytest.mark.parametrize(
    "current,requested",
    [
        (ClaimStatus.APPROVED, ClaimStatus.REJECTED),
        (ClaimStatus.REJECTED, ClaimStatus.APPROVED),
        (ClaimStatus.APPROVED, ClaimStatus.PENDING),
        (ClaimStatus.REJECTED, ClaimStatus.PENDING),
        (ClaimStatus.PENDING, ClaimStatus.PENDING),
    ],
)
def test_other_transitions_are_refused(lifecycle: ClaimLifecycle, current, requested) -> None:
    result = lifecycle.transition(current, requested)
    assert not result.allowed
    assert result.new_status is None
    assert result.current == current
    assert result.requested == requested
    assert current.value in result.reason


def test_repeating_a_decision_is_refused_not_a_no_op(lifecycle: ClaimLifecycle) -> None:
    result = lifecycle.transition(ClaimStatus.APPROVED, ClaimStatus.APPROVED)
    assert not result.allowed
    assert result.reason == "Claim is already Approved"


def test_terminal_statuses(lifecycle: ClaimLifecycle) -> None:
    assert not lifecycle.is_terminal(ClaimStatus.PENDING)
    assert lifecycle.is_terminal(ClaimStatus.APPROVED)
    assert lifecycle.is_terminal(ClaimStatus.REJECTED)
    assert lifecycle.get_valid_transitions(ClaimStatus.APPROVED) == []
    assert lifecycle.get_valid_transitions(ClaimStatus.PENDING) == [ClaimStatus.APPROVED, ClaimStatus.REJECTED]


def test_initial_status_is_pending(lifecycle: ClaimLifecycle) -> None:
    assert lifecycle.INITIAL_STATUS == ClaimStatus.PENDING
    assert not lifecycle.is_terminal(lifecycle.INITIAL_STATUS)
