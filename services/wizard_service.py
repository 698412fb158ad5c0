"""
Bulk upload wizard.

A WizardSession owns all working data of one import attempt (parsed
products, matched images, progress) and moves through the stages in
models.wizard.WIZARD_TRANSITIONS. Only the stage actions below mutate it.

Sessions live in memory with a sliding TTL; single-server only.
"""

import uuid
from datetime import datetime, timedelta
from typing import Iterable, Optional
import structlog

from config import settings
from models.bulk_upload import (
    ReviewRow,
    ReviewResponse,
    UploadOutcomeResponse,
    UploadProgressResponse,
    WizardSessionResponse,
)
from models.catalog import ReferenceCatalogs
from models.wizard import WizardStage, UploadStatus, is_valid_wizard_transition
from exceptions import (
    AppError,
    CSVParseError,
    InvalidWizardTransitionError,
    NoEligibleProductsError,
    WizardSessionNotFoundError,
    WizardStageError,
)
from parsers.product_csv_parser import ParsedProduct, ProductParseResult, parse_product_csv
from services.bulk_upload_service import BulkUploadService, BulkUploadSummary, UploadProgress
from services.image_matcher_service import (
    ImageAsset,
    ImageMatcherService,
    ImageMatchSummary,
    MatchedImageSet,
    get_image_matcher_service,
)

logger = structlog.get_logger(__name__)

CSV_EXTENSION = ".csv"


class WizardSession:
    """State of one bulk upload dialog."""

    def __init__(
        self,
        catalogs: ReferenceCatalogs,
        session_id: Optional[str] = None,
        matcher: Optional[ImageMatcherService] = None
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.catalogs = catalogs
        self.matcher = matcher or get_image_matcher_service()
        self._reset()

    def _reset(self) -> None:
        self.stage = WizardStage.TEMPLATE
        self.products: list[ParsedProduct] = []
        self.images = MatchedImageSet()
        self.progress = UploadProgress()
        self.summary: Optional[BulkUploadSummary] = None
        self.error: Optional[str] = None
        self._pending_upload: Optional[tuple[list[ParsedProduct], MatchedImageSet, UploadProgress]] = None

    # ===================
    # STAGE HELPERS
    # ===================

    def _transition_to(self, new_stage: WizardStage) -> None:
        if not is_valid_wizard_transition(self.stage, new_stage):
            raise InvalidWizardTransitionError(self.stage.value, new_stage.value)

        logger.info(
            "wizard_stage_changed",
            session_id=self.session_id,
            from_stage=self.stage.value,
            to_stage=new_stage.value
        )
        self.stage = new_stage

    def _require_stage(self, action: str, stage: WizardStage) -> None:
        if self.stage != stage:
            raise WizardStageError(action, self.stage.value, stage.value)

    def _sync_product_images(self) -> None:
        for product in self.products:
            product.images = [asset.filename for asset in self.images.get(product.slug)]

    @property
    def eligible_count(self) -> int:
        return sum(1 for p in self.products if p.is_eligible)

    @property
    def error_count(self) -> int:
        return sum(1 for p in self.products if not p.is_eligible)

    # ===================
    # STAGE ACTIONS
    # ===================

    def start_upload(self) -> None:
        """template -> upload."""
        self._transition_to(WizardStage.UPLOAD)
        self.error = None

    def load_csv(self, filename: str, content: bytes) -> ProductParseResult:
        """
        Parse the product CSV and advance to the images step.

        On rejection the stage stays at upload, `error` holds the message,
        and the error is re-raised.

        Raises:
            CSVParseError: Wrong file type, not UTF-8, or no header row
            MissingColumnsError: Required columns absent
        """
        self._require_stage("upload a CSV file", WizardStage.UPLOAD)

        try:
            if not (filename or "").lower().endswith(CSV_EXTENSION):
                raise CSVParseError(
                    message="Please upload a CSV file",
                    details={"filename": filename}
                )
            result = parse_product_csv(content, self.catalogs)
        except AppError as e:
            self.error = e.message
            logger.warning(
                "wizard_csv_rejected",
                session_id=self.session_id,
                filename=filename,
                code=e.code
            )
            raise

        self.products = result.products
        self.images = MatchedImageSet()
        self.error = None
        self._transition_to(WizardStage.IMAGES)

        logger.info(
            "wizard_csv_loaded",
            session_id=self.session_id,
            filename=filename,
            valid=result.valid_count,
            invalid=result.error_count
        )

        return result

    def add_images(self, assets: Iterable[ImageAsset]) -> ImageMatchSummary:
        """Match a batch of image files to the parsed products."""
        self._require_stage("add images", WizardStage.IMAGES)

        self.images, summary = self.matcher.match_images(assets, self.products, self.images)
        self._sync_product_images()
        return summary

    def remove_image(self, slug: str, index: int) -> None:
        """Drop one pending image from a product."""
        self._require_stage("remove images", WizardStage.IMAGES)

        removed = self.images.remove(slug, index)
        self._sync_product_images()
        logger.debug(
            "wizard_image_removed",
            session_id=self.session_id,
            slug=slug,
            filename=removed.filename
        )

    def back(self) -> None:
        """images -> upload; parsed products and images are discarded."""
        self._transition_to(WizardStage.UPLOAD)
        self.products = []
        self.images = MatchedImageSet()
        self.error = None

    def begin_upload(self) -> int:
        """
        images -> progress.

        Returns:
            Number of products that will be uploaded

        Raises:
            InvalidWizardTransitionError: Not in the images step
            NoEligibleProductsError: No error-free products
        """
        if not is_valid_wizard_transition(self.stage, WizardStage.PROGRESS):
            raise InvalidWizardTransitionError(self.stage.value, WizardStage.PROGRESS.value)

        eligible = [p for p in self.products if p.is_eligible]
        if not eligible:
            raise NoEligibleProductsError()

        self._transition_to(WizardStage.PROGRESS)
        self.progress = UploadProgress(total=len(eligible), status=UploadStatus.UPLOADING)
        self._pending_upload = (eligible, self.images, self.progress)
        return len(eligible)

    def run_upload(self, service: BulkUploadService) -> BulkUploadSummary:
        """
        Run the upload captured by begin_upload().

        Works on its own references, so close() during the run resets
        the session without stopping the loop.
        """
        if self._pending_upload is None:
            raise WizardStageError("run the upload", self.stage.value, WizardStage.PROGRESS.value)

        products, images, progress = self._pending_upload
        self._pending_upload = None

        summary = service.upload_products(products, images, self.catalogs, progress=progress)

        if progress is self.progress:
            self.summary = summary
        return summary

    def confirm(self, service: BulkUploadService) -> BulkUploadSummary:
        """begin_upload() and run_upload() in one call."""
        self.begin_upload()
        return self.run_upload(service)

    def close(self) -> None:
        """Reset all working state; the next use starts at the template step."""
        logger.info(
            "wizard_closed",
            session_id=self.session_id,
            stage=self.stage.value
        )
        self._reset()

    # ===================
    # VIEWS
    # ===================

    def review(self) -> ReviewResponse:
        """Per-row status with aggregate counts."""
        rows = [
            ReviewRow(
                row=p.row,
                name=p.name,
                sku=p.sku,
                slug=p.slug,
                price=p.price,
                image_count=len(p.images),
                images=list(p.images),
                valid=p.is_eligible,
                errors=list(p.errors),
            )
            for p in self.products
        ]
        return ReviewResponse(
            valid_count=self.eligible_count,
            error_count=self.error_count,
            image_count=self.images.total,
            rows=rows,
        )

    def progress_view(self) -> UploadProgressResponse:
        """Live counters; totals and outcomes once the run completes."""
        response = UploadProgressResponse(
            current=self.progress.current,
            total=self.progress.total,
            status=self.progress.status,
        )
        if self.summary is not None and self.progress.status == UploadStatus.COMPLETE:
            response.succeeded = self.summary.succeeded
            response.failed = self.summary.failed
            response.outcomes = [
                UploadOutcomeResponse(
                    row=o.row,
                    slug=o.slug,
                    success=o.success,
                    product_id=o.product_id,
                    image_urls=o.image_urls,
                    error=o.error,
                )
                for o in self.summary.outcomes
            ]
        return response

    def to_response(self) -> WizardSessionResponse:
        return WizardSessionResponse(
            session_id=self.session_id,
            stage=self.stage,
            error=self.error,
            review=self.review(),
            progress=self.progress_view(),
        )


# ===================
# SESSION REGISTRY
# ===================

_sessions: dict[str, tuple[datetime, WizardSession]] = {}


def _expiry(ttl_minutes: Optional[int] = None) -> datetime:
    return datetime.now() + timedelta(minutes=ttl_minutes or settings.wizard_session_ttl_minutes)


def open_session(catalogs: ReferenceCatalogs) -> WizardSession:
    """Create a session at the template step."""
    _cleanup_expired()
    session = WizardSession(catalogs)
    _sessions[session.session_id] = (_expiry(), session)
    logger.info("wizard_opened", session_id=session.session_id)
    return session


def get_session(session_id: str) -> WizardSession:
    """
    Look up a live session and extend its lifetime.

    Raises:
        WizardSessionNotFoundError: Unknown or expired id
    """
    entry = _sessions.get(session_id)
    if entry is None:
        raise WizardSessionNotFoundError(session_id)

    expires_at, session = entry
    if datetime.now() > expires_at:
        del _sessions[session_id]
        raise WizardSessionNotFoundError(session_id)

    _sessions[session_id] = (_expiry(), session)
    return session


def close_session(session_id: str) -> None:
    """Reset and discard a session."""
    session = get_session(session_id)
    session.close()
    _sessions.pop(session_id, None)


def _cleanup_expired() -> None:
    """Remove all expired sessions."""
    now = datetime.now()
    expired = [k for k, (exp, _) in _sessions.items() if now > exp]
    for k in expired:
        del _sessions[k]
