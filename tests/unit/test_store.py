import pytest

from app.core.errors import ClaimConflictError, ClaimNotFoundError, PersistenceError
from app.core.models import Claim
from app.core.states import ClaimStatus
from app.storage import build_claim_store
from app.storage.memory import InMemoryClaimStore
from app.storage.sqlite import SQLiteClaimStore


@pytest.fixture(params=["memory", "sqlite"])
def claim_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryClaimStore()
    return SQLiteClaimStore(str(tmp_path / "db" / "claims.db"))


def make_claim(name: str = "John Doe", status: ClaimStatus = ClaimStatus.PENDING) -> Claim:
    return Claim(
        lecturer_name=name,
        additional_notes="First claim note",
        supporting_document=f"{name.replace(' ', '_')}.pdf",
        original_filename="document1.pdf",
        status=status,
    )


def test_create_assigns_increasing_ids(claim_store) -> None:
    first = claim_store.create(make_claim("John Doe"))
    second = claim_store.create(make_claim("Jane Smith"))
    assert first >= 1
    assert second > first


def test_get_by_id_returns_stored_fields(claim_store) -> None:
    claim = make_claim()
    claim_id = claim_store.create(claim)

    stored = claim_store.get_by_id(claim_id)
    assert stored.id == claim_id
    assert stored.lecturer_name == claim.lecturer_name
    assert stored.additional_notes == claim.additional_notes
    assert stored.supporting_document == claim.supporting_document
    assert stored.status == ClaimStatus.PENDING
    assert stored.created_at == claim.created_at


def test_get_by_id_unknown_raises_not_found(claim_store) -> None:
    with pytest.raises(ClaimNotFoundError):
        claim_store.get_by_id(999)


def test_returned_claims_are_copies(claim_store) -> None:
    claim_id = claim_store.create(make_claim())
    fetched = claim_store.get_by_id(claim_id)
    fetched.status = ClaimStatus.APPROVED
    assert claim_store.get_by_id(claim_id).status == ClaimStatus.PENDING


def test_list_by_status_keeps_insertion_order(claim_store) -> None:
    ids = [claim_store.create(make_claim(name)) for name in ("A One", "B Two", "C Three")]
    approved = claim_store.get_by_id(ids[1])
    approved.status = ClaimStatus.APPROVED
    claim_store.update(approved)

    pending = claim_store.list_by_status(ClaimStatus.PENDING)
    assert [c.id for c in pending] == [ids[0], ids[2]]
    assert [c.id for c in claim_store.list_by_status(ClaimStatus.APPROVED)] == [ids[1]]
    assert [c.id for c in claim_store.list_all()] == ids


def test_list_is_a_fresh_snapshot(claim_store) -> None:
    claim_store.create(make_claim())
    snapshot = claim_store.list_by_status(ClaimStatus.PENDING)
    claim_store.create(make_claim("Jane Smith"))
    assert len(snapshot) == 1
    assert len(claim_store.list_by_status(ClaimStatus.PENDING)) == 2


def test_update_unknown_raises_not_found(claim_store) -> None:
    ghost = make_claim()
    ghost.id = 42
    with pytest.raises(ClaimNotFoundError):
        claim_store.update(ghost)


def test_update_with_stale_expected_status_conflicts(claim_store) -> None:
    claim_id = claim_store.create(make_claim())
    first = claim_store.get_by_id(claim_id)
    second = claim_store.get_by_id(claim_id)

    first.status = ClaimStatus.APPROVED
    claim_store.update(first, expected_status=ClaimStatus.PENDING)

    second.status = ClaimStatus.REJECTED
    with pytest.raises(ClaimConflictError) as exc_info:
        claim_store.update(second, expected_status=ClaimStatus.PENDING)

    assert isinstance(exc_info.value, PersistenceError)
    assert exc_info.value.actual == ClaimStatus.APPROVED
    assert claim_store.get_by_id(claim_id).status == ClaimStatus.APPROVED


def test_delete_removes_record_and_second_delete_fails(claim_store) -> None:
    claim_id = claim_store.create(make_claim())
    claim_store.delete(claim_id)

    with pytest.raises(ClaimNotFoundError):
        claim_store.get_by_id(claim_id)
    with pytest.raises(ClaimNotFoundError):
        claim_store.delete(claim_id)


def test_sqlite_store_persists_across_instances(tmp_path) -> None:
    db_path = str(tmp_path / "claims.db")
    claim = make_claim()
    claim.record_status_change(ClaimStatus.APPROVED, actor="Reviewer", action="APPROVED", reason="ok")
    claim_id = SQLiteClaimStore(db_path).create(claim)

    reopened = SQLiteClaimStore(db_path).get_by_id(claim_id)
    assert reopened.status == ClaimStatus.APPROVED
    assert reopened.audit_log[0].actor == "Reviewer"
    assert reopened.audit_log[0].previous_status == ClaimStatus.PENDING
    assert reopened.updated_at == claim.updated_at


def test_sqlite_store_wraps_database_errors(tmp_path) -> None:
    db_path = tmp_path / "claims.db"
    store = SQLiteClaimStore(str(db_path))
    with store.db_conn() as conn:
        conn.execute("DROP TABLE claims")

    with pytest.raises(PersistenceError):
        store.list_all()


def test_build_claim_store_picks_backend(tmp_path) -> None:
    assert isinstance(build_claim_store(None), InMemoryClaimStore)
    assert isinstance(build_claim_store(str(tmp_path / "claims.db")), SQLiteClaimStore)
