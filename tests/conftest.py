import io

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.models import Attachment, ClaimCreate
from app.main import create_app
from app.services.review import ReviewService
from app.services.submission import SubmissionService
from app.storage.documents import DocumentStorage
from app.storage.memory import InMemoryClaimStore

PDF_BYTES = b"%PDF-1.4\n%%EOF\n"


@pytest.fixture
def store():
    return InMemoryClaimStore()


@pytest.fixture
def documents(tmp_path):
    return DocumentStorage(str(tmp_path / "uploads"))


@pytest.fixture
def submissions(store, documents):
    return SubmissionService(store, documents)


@pytest.fixture
def reviews(store, documents):
    return ReviewService(store, documents=documents)


@pytest.fixture
def submit_claim(submissions):
    """Submit a valid claim and return it."""
    def _submit(lecturer_name="Jane Doe", notes="Sample notes", filename="test.pdf", content=PDF_BYTES):
        draft = ClaimCreate(lecturer_name=lecturer_name, additional_notes=notes)
        attachment = Attachment(filename=filename, size=len(content))
        return submissions.submit(draft, attachment, io.BytesIO(content))
    return _submit


@pytest.fixture
def settings(tmp_path):
    return Settings(uploads_dir=str(tmp_path / "uploads"), database_path=None, log_level="WARNING")


@pytest.fixture
def api_app(settings):
    return create_app(settings)


@pytest.fixture
def client(api_app):
    with TestClient(api_app) as test_client:
        yield test_client
