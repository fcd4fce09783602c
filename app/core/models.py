"""
Claim Pydantic Models

Defines the data models for claims and their supporting documents.
"""
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, Field

from .states import ClaimStatus


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value.strip()


NonEmptyStr = Annotated[str, AfterValidator(_require_text)]


class AuditLogEntry(BaseModel):
    """Entry in the claim audit log recording who did what."""
    actor: str = Field(..., description="Name of the reviewer or system that acted")
    action: str = Field(..., description="SUBMITTED, APPROVED or REJECTED")
    previous_status: Optional[ClaimStatus] = Field(default=None, description="Status before the action")
    new_status: ClaimStatus = Field(..., description="Status after the action")
    reason: str = Field(default="", description="Free text reason given by the actor")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the action happened")


class ClaimCreate(BaseModel):
    """
    Claim draft as supplied by the submitter.

    A client-supplied status is accepted for compatibility but never used;
    every new claim starts out PENDING.
    """
    lecturer_name: NonEmptyStr = Field(..., description="Name of the lecturer submitting the claim")
    additional_notes: str = Field(..., description="Free text notes, may be empty")
    status: Optional[str] = Field(default=None, description="Ignored on submission")


class Attachment(BaseModel):
    """Metadata of an uploaded supporting document. Content travels separately."""
    filename: Optional[str] = Field(default=None, description="File name as uploaded")
    size: int = Field(..., ge=0, description="Length of the content in bytes")


class Claim(BaseModel):
    """
    Claim Model

    A lecturer's claim with its supporting document, review status and audit trail.
    """
    id: Optional[int] = Field(default=None, description="Identifier assigned by the store")
    lecturer_name: NonEmptyStr = Field(..., description="Name of the lecturer")
    additional_notes: str = Field(..., description="Free text notes")
    supporting_document: str = Field(..., description="Storage reference of the validated attachment")
    original_filename: str = Field(default="", description="File name of the attachment as uploaded")
    status: ClaimStatus = Field(default=ClaimStatus.PENDING, description="Current review status")
    audit_log: List[AuditLogEntry] = Field(
        default_factory=list,
        description="Trail of submission and review actions"
    )
    created_at: datetime = Field(
        default_factory=datetime.now,
        description="Timestamp when claim was created"
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp of last update"
    )

    def record_status_change(
        self,
        new_status: ClaimStatus,
        actor: str,
        action: str,
        reason: str = ""
    ) -> None:
        """Move the claim to new_status and append the matching audit entry."""
        entry = AuditLogEntry(
            actor=actor,
            action=action,
            previous_status=self.status,
            new_status=new_status,
            reason=reason
        )
        self.status = new_status
        self.audit_log.append(entry)
        self.updated_at = entry.timestamp
