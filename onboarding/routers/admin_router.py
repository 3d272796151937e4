"""FastAPI routes for the admin dashboard."""
import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from onboarding.models.editing import EditableSubmission
from onboarding.models.submission import Submission
from onboarding.routers.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"])

_submission_handler = None


def set_submission_handler(handler):
    """Set the submission handler instance (called during startup)."""
    global _submission_handler
    _submission_handler = handler
    logger.info("[AdminRouter] Handler injected successfully")


def get_handler():
    if _submission_handler is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _submission_handler


@router.get("/submissions", summary="List submissions, newest first")
def list_submissions(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> dict:
    try:
        return get_handler().list_submissions(limit, offset)
    except Exception as e:
        raise to_http_exception(e, "list_submissions")


@router.get("/submissions/{submission_id}", response_model=EditableSubmission, summary="Load for editing")
def get_submission(submission_id: str) -> EditableSubmission:
    try:
        return get_handler().get_submission(submission_id)
    except Exception as e:
        raise to_http_exception(e, "get_submission")


@router.put(
    "/submissions/{submission_id}",
    response_model=EditableSubmission,
    summary="Save edits",
    description="Fails with 409 if the submission changed since it was loaded.",
)
def save_submission(submission_id: str, edited: EditableSubmission) -> EditableSubmission:
    try:
        return get_handler().save_submission(submission_id, edited)
    except Exception as e:
        raise to_http_exception(e, "save_submission")


@router.get("/submissions/{submission_id}/export", summary="Export as JSON")
def export_submission(submission_id: str, download: bool = Query(False)):
    try:
        if not download:
            return get_handler().export_submission(submission_id)
        filename, content = get_handler().export_submission_file(submission_id)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    except Exception as e:
        raise to_http_exception(e, "export_submission")


@router.post("/submissions/{submission_id}/mark-live", response_model=Submission, summary="Mark live")
def mark_live(submission_id: str) -> Submission:
    try:
        return get_handler().mark_live(submission_id)
    except Exception as e:
        raise to_http_exception(e, "mark_live")
