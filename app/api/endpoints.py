"""
FastAPI Endpoints for Claim Processing

Provides REST API for submitting, reviewing, tracking and deleting claims.

Endpoints are plain functions so FastAPI runs each request in its thread
pool; the services block only on storage calls.
"""
import io
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, ValidationError

from app.api.dependencies import get_review_service, get_submission_service
from app.core.errors import (
    ClaimConflictError,
    ClaimError,
    ClaimNotFoundError,
    ClaimValidationError,
    InvalidTransitionError,
    PersistenceError,
)
from app.core.models import Attachment, Claim, ClaimCreate
from app.core.states import ClaimStatus
from app.services.review import DEFAULT_REVIEWER, ReviewService
from app.services.submission import SubmissionService

logger = logging.getLogger(__name__)

# Initialize router
router = APIRouter(prefix="/claims", tags=["claims"])


class ClaimResponse(BaseModel):
    """Response model for claim operations."""
    claim: Claim
    message: str
    next_valid_statuses: List[ClaimStatus]


class ReviewRequest(BaseModel):
    """Request model for approve/reject actions."""
    reviewer_name: str = DEFAULT_REVIEWER
    reason: str = ""


class ReviewResponse(BaseModel):
    """Response model for approve/reject actions."""
    claim_id: int
    action: str
    previous_status: ClaimStatus
    new_status: ClaimStatus
    message: str


class DeleteResponse(BaseModel):
    """Response model for claim deletion."""
    claim_id: int
    previous_status: ClaimStatus
    message: str


def _to_http_exception(error: ClaimError) -> HTTPException:
    """Translate a claim error into the matching HTTP response."""
    if isinstance(error, ClaimValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
    if isinstance(error, ClaimNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if isinstance(error, InvalidTransitionError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": error.message,
                "current_status": error.current.value,
                "requested_status": error.requested.value,
            }
        )
    if isinstance(error, ClaimConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.message)
    if isinstance(error, PersistenceError):
        logger.error(f"Storage failure: {error.message}")
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Claim storage is temporarily unavailable. Please retry."
        )
    logger.error(f"Unhandled claim error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Claim processing failed"
    )


def _upload_size(upload: UploadFile) -> int:
    """Size recorded by the multipart parser, or measured by seeking the spooled file."""
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, io.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def _next_valid_statuses(service: ReviewService, claim: Claim) -> List[ClaimStatus]:
    return service.lifecycle.get_valid_transitions(claim.status)


@router.post("/", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
def submit_claim(
    lecturer_name: str = Form(..., description="Name of the lecturer"),
    additional_notes: str = Form("", description="Free text notes"),
    claim_status: Optional[str] = Form(None, alias="status", description="Ignored, claims start Pending"),
    supporting_document: Optional[UploadFile] = File(None, description="PDF or Word document"),
    submissions: SubmissionService = Depends(get_submission_service),
    reviews: ReviewService = Depends(get_review_service)
) -> ClaimResponse:
    """
    Submit a new claim with its supporting document.

    The claim always starts in Pending state.
    """
    try:
        draft = ClaimCreate(
            lecturer_name=lecturer_name,
            additional_notes=additional_notes,
            status=claim_status
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        )

    if supporting_document is None:
        attachment = Attachment(filename=None, size=0)
        stream = io.BytesIO()
    else:
        attachment = Attachment(
            filename=supporting_document.filename,
            size=_upload_size(supporting_document)
        )
        stream = supporting_document.file

    try:
        claim = submissions.submit(draft, attachment, stream)
    except ClaimError as e:
        raise _to_http_exception(e)

    return ClaimResponse(
        claim=claim,
        message=f"Claim submitted successfully with ID {claim.id}",
        next_valid_statuses=_next_valid_statuses(reviews, claim)
    )


@router.get("/", response_model=List[Claim])
def track_claims(
    claim_status: Optional[ClaimStatus] = Query(None, alias="status"),
    reviews: ReviewService = Depends(get_review_service)
) -> List[Claim]:
    """
    List all claims, optionally filtered by status.
    """
    try:
        return reviews.track(claim_status)
    except ClaimError as e:
        raise _to_http_exception(e)


@router.get("/pending", response_model=List[Claim])
def list_pending_claims(reviews: ReviewService = Depends(get_review_service)) -> List[Claim]:
    """
    List claims waiting for review, oldest first.
    """
    try:
        return reviews.list_pending()
    except ClaimError as e:
        raise _to_http_exception(e)


@router.get("/dashboard/summary")
def get_dashboard_summary(reviews: ReviewService = Depends(get_review_service)) -> Dict:
    """Get summary statistics for the review dashboard."""
    try:
        claims = reviews.track()
    except ClaimError as e:
        raise _to_http_exception(e)

    status_counts = {}
    for claim_status in ClaimStatus:
        status_counts[claim_status.value] = sum(1 for c in claims if c.status == claim_status)

    return {
        "total_claims": len(claims),
        "status_counts": status_counts,
        "claims": [
            {
                "id": c.id,
                "lecturer": c.lecturer_name,
                "status": c.status.value,
                "document": c.original_filename,
                "created_at": c.created_at.isoformat()
            }
            for c in claims
        ]
    }


@router.get("/{claim_id}", response_model=ClaimResponse)
def get_claim(claim_id: int, reviews: ReviewService = Depends(get_review_service)) -> ClaimResponse:
    """
    Get details of a specific claim.
    """
    try:
        claim = reviews.get(claim_id)
    except ClaimError as e:
        raise _to_http_exception(e)

    return ClaimResponse(
        claim=claim,
        message=f"Claim {claim_id} retrieved",
        next_valid_statuses=_next_valid_statuses(reviews, claim)
    )


@router.post("/{claim_id}/approve", response_model=ReviewResponse)
def approve_claim(
    claim_id: int,
    request: Optional[ReviewRequest] = None,
    reviews: ReviewService = Depends(get_review_service)
) -> ReviewResponse:
    """
    Approve a Pending claim.
    """
    reviewer = request.reviewer_name if request else DEFAULT_REVIEWER
    reason = request.reason if request else ""

    try:
        claim = reviews.approve(claim_id, actor=reviewer, reason=reason)
    except ClaimError as e:
        raise _to_http_exception(e)

    return ReviewResponse(
        claim_id=claim_id,
        action="APPROVED",
        previous_status=claim.audit_log[-1].previous_status,
        new_status=claim.status,
        message=f"Claim {claim_id} approved by {reviewer}."
    )


@router.post("/{claim_id}/reject", response_model=ReviewResponse)
def reject_claim(
    claim_id: int,
    request: Optional[ReviewRequest] = None,
    reviews: ReviewService = Depends(get_review_service)
) -> ReviewResponse:
    """
    Reject a Pending claim.
    """
    reviewer = request.reviewer_name if request else DEFAULT_REVIEWER
    reason = request.reason if request and request.reason else "Claim rejected after review"

    try:
        claim = reviews.reject(claim_id, actor=reviewer, reason=reason)
    except ClaimError as e:
        raise _to_http_exception(e)

    return ReviewResponse(
        claim_id=claim_id,
        action="REJECTED",
        previous_status=claim.audit_log[-1].previous_status,
        new_status=claim.status,
        message=f"Claim {claim_id} rejected by {reviewer}. Reason: {reason}"
    )


@router.delete("/{claim_id}", response_model=DeleteResponse)
def delete_claim(claim_id: int, reviews: ReviewService = Depends(get_review_service)) -> DeleteResponse:
    """
    Delete a claim regardless of its status.
    """
    try:
        claim = reviews.delete(claim_id)
    except ClaimError as e:
        raise _to_http_exception(e)

    return DeleteResponse(
        claim_id=claim_id,
        previous_status=claim.status,
        message=f"Claim {claim_id} deleted"
    )
