"""
Bulk product upload API routes.

Drives the staged upload dialog:
template -> upload (CSV) -> images (match + review) -> progress.
"""

from fastapi import APIRouter, BackgroundTasks, File, UploadFile
from fastapi.responses import JSONResponse, Response
import structlog

from models.bulk_upload import (
    ImageMatchResponse,
    UploadProgressResponse,
    WizardSessionResponse,
)
from services.catalog_service import get_catalog_service
from services.bulk_upload_service import BulkUploadService
from services.image_matcher_service import ImageAsset
from services.template_service import generate_template, TEMPLATE_FILENAME
from services import wizard_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/bulk-upload", tags=["Bulk Upload"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def _run_upload(session: wizard_service.WizardSession) -> None:
    """Background task body; failures are logged, counters stay readable."""
    try:
        session.run_upload(BulkUploadService())
    except Exception as e:
        logger.error(
            "bulk_upload_run_failed",
            session_id=session.session_id,
            error=str(e),
            error_type=type(e).__name__
        )


# ===================
# ROUTES
# ===================

@router.post("/sessions", response_model=WizardSessionResponse, status_code=201)
async def open_session():
    """
    Open a bulk upload session.

    Snapshots categories, collections, and product options; the snapshot
    is used for validation and upload for the whole session.
    """
    try:
        catalogs = get_catalog_service().load_snapshot()
        session = wizard_service.open_session(catalogs)
        return session.to_response()

    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}", response_model=WizardSessionResponse)
async def get_session(session_id: str):
    """Current step, last error, review table, and progress."""
    try:
        return wizard_service.get_session(session_id).to_response()

    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}/template")
async def download_template(session_id: str):
    """CSV template with an example row and reference data comments."""
    try:
        session = wizard_service.get_session(session_id)
        content = generate_template(session.catalogs)

        return Response(
            content=content,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'}
        )

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/start", response_model=WizardSessionResponse)
async def start_upload(session_id: str):
    """Move from the template step to the CSV upload step."""
    try:
        session = wizard_service.get_session(session_id)
        session.start_upload()
        return session.to_response()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/csv", response_model=WizardSessionResponse)
async def upload_csv(session_id: str, file: UploadFile = File(...)):
    """
    Upload the filled-in CSV.

    Rows with errors are kept and shown in the review table.

    Raises:
        422: Not a CSV, not UTF-8, empty, or missing required columns
    """
    logger.info(
        "bulk_upload_csv_received",
        session_id=session_id,
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        session = wizard_service.get_session(session_id)
        content = await file.read()
        session.load_csv(file.filename or "", content)
        return session.to_response()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/images", response_model=ImageMatchResponse)
async def upload_images(session_id: str, files: list[UploadFile] = File(...)):
    """
    Upload product images named <slug-or-sku>_<n>.webp.

    Wrong-format or oversize files are skipped and counted.
    """
    try:
        session = wizard_service.get_session(session_id)

        assets = []
        for upload in files:
            assets.append(ImageAsset(
                filename=upload.filename or "",
                content=await upload.read(),
                content_type=upload.content_type,
            ))

        summary = session.add_images(assets)

        return ImageMatchResponse(
            matched=summary.matched,
            unmatched=summary.unmatched,
            rejected=summary.rejected,
            total_matched=summary.total_matched,
        )

    except Exception as e:
        return handle_error(e)


@router.delete("/sessions/{session_id}/images/{slug}/{index}", response_model=WizardSessionResponse)
async def remove_image(session_id: str, slug: str, index: int):
    """Remove one pending image from a product."""
    try:
        session = wizard_service.get_session(session_id)
        session.remove_image(slug, index)
        return session.to_response()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/back", response_model=WizardSessionResponse)
async def go_back(session_id: str):
    """Return to the CSV step, discarding parsed products and images."""
    try:
        session = wizard_service.get_session(session_id)
        session.back()
        return session.to_response()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/confirm", response_model=UploadProgressResponse, status_code=202)
async def confirm_upload(session_id: str, background_tasks: BackgroundTasks):
    """
    Start creating the valid products.

    Returns immediately; poll /progress for counters.

    Raises:
        409: Not in the images step
        422: No valid products
    """
    try:
        session = wizard_service.get_session(session_id)
        session.begin_upload()
        background_tasks.add_task(_run_upload, session)
        return session.progress_view()

    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}/progress", response_model=UploadProgressResponse)
async def get_progress(session_id: str):
    """Live upload counters; succeeded/failed totals once complete."""
    try:
        return wizard_service.get_session(session_id).progress_view()

    except Exception as e:
        return handle_error(e)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str):
    """
    Close the dialog and discard all working state.

    Does not stop an upload that is already running.
    """
    try:
        wizard_service.close_session(session_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)
