"""
Claim Review Service

FastAPI application entry point. Run with:

    uvicorn app.main:create_app --factory --port 8000
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router as claims_router
from app.core.config import Settings
from app.services.review import ReviewService
from app.services.submission import SubmissionService
from app.state_machine.machine import ClaimLifecycle
from app.storage import DocumentStorage, build_claim_store

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management."""
    logger.info("Starting Claim Review Service")
    yield
    logger.info("Shutting down Claim Review Service")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application with its own store, document storage and services.

    Each call returns an independent app; nothing is shared between them.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_title,
        description="""
        Submission, review and tracking of lecturer claims.

        ## Workflow

        1. Submit a claim with a supporting document: `POST /claims/` (multipart)
        2. Reviewers list waiting claims: `GET /claims/pending`
        3. Approve or reject: `POST /claims/{id}/approve`, `POST /claims/{id}/reject`
        4. Track all claims: `GET /claims/`, delete with `DELETE /claims/{id}`

        Claims move Pending -> Approved or Pending -> Rejected, never back.
        """,
        version=VERSION,
        lifespan=lifespan
    )

    store = build_claim_store(settings.database_path)
    documents = DocumentStorage(settings.uploads_dir)
    lifecycle = ClaimLifecycle()

    app.state.settings = settings
    app.state.submission_service = SubmissionService(
        store,
        documents,
        lifecycle=lifecycle,
        allowed_extensions=settings.allowed_extensions,
        max_bytes=settings.max_upload_bytes
    )
    app.state.review_service = ReviewService(store, documents=documents, lifecycle=lifecycle)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(claims_router)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with system info."""
        return {
            "system": settings.app_title,
            "version": VERSION,
            "status": "operational",
            "docs": "/docs"
        }

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
