"""
Claim Submission Service

Accepts a new claim once its supporting document passes validation.
"""
import logging
from typing import BinaryIO, Iterable, Optional

from app.core.errors import ClaimValidationError, PersistenceError
from app.core.models import Attachment, AuditLogEntry, Claim, ClaimCreate
from app.core.states import ClaimStatus
from app.services.validator import (
    DEFAULT_ALLOWED_EXTENSIONS,
    DEFAULT_MAX_BYTES,
    validate_attachment,
)
from app.state_machine.machine import ClaimLifecycle
from app.storage.base import ClaimStore
from app.storage.documents import DocumentStorage

logger = logging.getLogger(__name__)


class SubmissionService:
    """
    Orchestrates validator, document storage and claim store for new claims.

    Submission is all-or-nothing: a rejected attachment touches neither
    storage, and a failed store write removes the document it just saved.
    """

    def __init__(
        self,
        store: ClaimStore,
        documents: DocumentStorage,
        allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
        max_bytes: Optional[int] = DEFAULT_MAX_BYTES,
        lifecycle: Optional[ClaimLifecycle] = None
    ):
        self.store = store
        self.documents = documents
        self.allowed_extensions = tuple(allowed_extensions)
        self.max_bytes = max_bytes
        self.lifecycle = lifecycle or ClaimLifecycle()

    def submit(self, draft: ClaimCreate, attachment: Attachment, stream: BinaryIO) -> Claim:
        """
        Submit a new claim.

        Args:
            draft: Lecturer name and notes; any status on it is ignored
            attachment: Metadata of the supporting document
            stream: Binary stream of the supporting document, read only once
                the attachment is accepted

        Returns:
            The stored claim, PENDING, with its assigned id

        Raises:
            ClaimValidationError: If the attachment is rejected
            PersistenceError: If the document or the claim cannot be stored
        """
        result = validate_attachment(
            attachment,
            allowed_extensions=self.allowed_extensions,
            max_bytes=self.max_bytes
        )
        if not result.ok:
            logger.warning(
                f"Rejected submission from {draft.lecturer_name}: "
                f"{attachment.filename!r} ({result.reason})"
            )
            raise ClaimValidationError(result.reason)

        if draft.status and draft.status != ClaimStatus.PENDING.value:
            logger.info(f"Ignoring client-supplied status {draft.status!r} on submission")

        initial_status = self.lifecycle.INITIAL_STATUS
        reference = self.documents.save(attachment.filename, stream)

        claim = Claim(
            lecturer_name=draft.lecturer_name,
            additional_notes=draft.additional_notes,
            supporting_document=reference,
            original_filename=attachment.filename,
            status=initial_status,
        )
        claim.audit_log.append(AuditLogEntry(
            actor=claim.lecturer_name,
            action="SUBMITTED",
            new_status=initial_status,
            timestamp=claim.created_at
        ))

        try:
            claim.id = self.store.create(claim)
        except Exception as e:
            logger.error(f"Failed to store claim for {draft.lecturer_name}: {e}")
            try:
                self.documents.delete(reference)
            except OSError as cleanup_error:
                logger.warning(f"Could not remove document {reference} after failed submission: {cleanup_error}")
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Failed to store claim: {e}") from e

        logger.info(f"Created new claim {claim.id} for {claim.lecturer_name}")
        return claim
