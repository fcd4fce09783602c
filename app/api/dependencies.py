"""Request-scoped access to the services built by create_app()."""
from fastapi import Request

from app.services.review import ReviewService
from app.services.submission import SubmissionService


def get_submission_service(request: Request) -> SubmissionService:
    return request.app.state.submission_service


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service
