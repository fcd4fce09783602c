import io

import pytest

from app.core.errors import ClaimValidationError, PersistenceError
from app.core.models import Attachment, ClaimCreate
from app.core.states import ClaimStatus
from app.services.submission import SubmissionService
from app.storage.documents import DocumentStorage
from app.storage.memory import InMemoryClaimStore

PDF_BYTES = b"%PDF-1.4\n%%EOF\n"


class BrokenStore(InMemoryClaimStore):
    def create(self, claim):
        raise RuntimeError("database is locked")


class StuckDocumentStorage(DocumentStorage):
    def delete(self, reference):
        raise PermissionError(f"cannot remove {reference}")


class UnreadableStream(io.RawIOBase):
    """Stream that fails if anything tries to read the upload."""
    def readable(self):
        return True

    def readinto(self, buffer):
        raise AssertionError("upload was read")


def test_valid_submission_is_pending_and_round_trips(submit_claim, store, documents) -> None:
    claim = submit_claim(lecturer_name="Lecturer", notes="Note", filename="test.pdf")

    stored = store.get_by_id(claim.id)
    assert stored.status == ClaimStatus.PENDING
    assert stored.lecturer_name == "Lecturer"
    assert stored.additional_notes == "Note"
    assert stored.original_filename == "test.pdf"
    assert stored.supporting_document == claim.supporting_document
    assert stored.supporting_document.endswith("_test.pdf")
    assert documents.load(stored.supporting_document) == PDF_BYTES


def test_submission_records_audit_entry(submit_claim) -> None:
    claim = submit_claim(lecturer_name="Lecturer")
    assert [e.action for e in claim.audit_log] == ["SUBMITTED"]
    assert claim.audit_log[0].actor == "Lecturer"
    assert claim.audit_log[0].new_status == ClaimStatus.PENDING


def test_client_supplied_status_is_ignored(submissions) -> None:
    draft = ClaimCreate(lecturer_name="Lecturer", additional_notes="", status="Approved")
    claim = submissions.submit(draft, Attachment(filename="doc.docx", size=3), io.BytesIO(b"abc"))
    assert claim.status == ClaimStatus.PENDING
    assert claim.additional_notes == ""


def test_invalid_type_creates_nothing(submissions, store, documents) -> None:
    draft = ClaimCreate(lecturer_name="Lecturer", additional_notes="Note")

    with pytest.raises(ClaimValidationError) as exc_info:
        submissions.submit(draft, Attachment(filename="test.exe", size=1024), UnreadableStream())

    assert exc_info.value.reason == "invalid file type"
    assert store.list_all() == []
    assert list(documents.uploads_dir.iterdir()) == []


def test_empty_file_is_rejected(submissions, store) -> None:
    draft = ClaimCreate(lecturer_name="Lecturer", additional_notes="Note")

    with pytest.raises(ClaimValidationError) as exc_info:
        submissions.submit(draft, Attachment(filename="test.pdf", size=0), UnreadableStream())

    assert exc_info.value.reason == "empty file"
    assert store.list_all() == []


def test_store_failure_removes_saved_document(documents) -> None:
    service = SubmissionService(BrokenStore(), documents)
    draft = ClaimCreate(lecturer_name="Lecturer", additional_notes="Note")

    with pytest.raises(PersistenceError):
        service.submit(draft, Attachment(filename="test.pdf", size=len(PDF_BYTES)), io.BytesIO(PDF_BYTES))

    assert list(documents.uploads_dir.iterdir()) == []


def test_blank_lecturer_name_is_refused() -> None:
    with pytest.raises(ValueError):
        ClaimCreate(lecturer_name="   ", additional_notes="Note")


def test_oversized_upload_is_refused_without_reading_it(store, documents) -> None:
    service = SubmissionService(store, documents, max_bytes=1024)
    draft = ClaimCreate(lecturer_name="Lecturer", additional_notes="Note")

    with pytest.raises(ClaimValidationError) as exc_info:
        service.submit(draft, Attachment(filename="test.pdf", size=4096), UnreadableStream())

    assert exc_info.value.reason == "file too large"
    assert store.list_all() == []
    assert list(documents.uploads_dir.iterdir()) == []


def test_store_failure_survives_failed_document_cleanup(tmp_path) -> None:
    documents = StuckDocumentStorage(str(tmp_path / "uploads"))
    service = SubmissionService(BrokenStore(), documents)
    draft = ClaimCreate(lecturer_name="Lecturer", additional_notes="Note")

    with pytest.raises(PersistenceError) as exc_info:
        service.submit(draft, Attachment(filename="test.pdf", size=len(PDF_BYTES)), io.BytesIO(PDF_BYTES))

    assert "database is locked" in exc_info.value.message
