"""Translation of service exceptions into HTTP errors."""
import logging

from fastapi import HTTPException
from pydantic import ValidationError

from onboarding.api.openai_caption_client import CaptionError
from onboarding.dao.redis_submission_dao import SubmissionConflictError, SubmissionNotFoundError
from onboarding.handlers.tools_handler import CaptionDisabledError
from onboarding.services.submission_persister import SubmissionPersistError
from onboarding.services.wizard import WizardBusyError, WizardFieldError, WizardSessionNotFoundError

logger = logging.getLogger(__name__)


def to_http_exception(e: Exception, operation: str) -> HTTPException:
    """Map an exception raised below the router to an HTTPException."""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, (WizardSessionNotFoundError, SubmissionNotFoundError)):
        return HTTPException(status_code=404, detail="Not found")
    if isinstance(e, WizardBusyError):
        return HTTPException(status_code=409, detail="Submission in progress")
    if isinstance(e, SubmissionConflictError):
        return HTTPException(
            status_code=409,
            detail="This submission was changed by someone else. Reload and try again.",
        )
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    if isinstance(e, (WizardFieldError, ValueError)):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, SubmissionPersistError):
        return HTTPException(status_code=502, detail=e.user_message)
    if isinstance(e, CaptionError):
        return HTTPException(status_code=502, detail="Captioning failed, please enter details manually")
    if isinstance(e, CaptionDisabledError):
        return HTTPException(status_code=503, detail="Captioning assist is not enabled")

    logger.error(f"[Router] Error in {operation}: {e}")
    return HTTPException(status_code=500, detail="Internal server error")
