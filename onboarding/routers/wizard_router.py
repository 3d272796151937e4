"""FastAPI routes for the intake wizard."""
import logging
from typing import Any

from fastapi import APIRouter, Body, File, HTTPException, UploadFile

from onboarding.routers.errors import to_http_exception

logger = logging.getLogger(__name__)

# Create router at module level
router = APIRouter(prefix="/v1/wizard", tags=["wizard"])

# Global handler reference - set during startup
_wizard_handler = None


def set_wizard_handler(handler):
    """Set the wizard handler instance (called during startup)."""
    global _wizard_handler
    _wizard_handler = handler
    logger.info("[WizardRouter] Handler injected successfully")


def get_handler():
    """Get the wizard handler, raising error if not initialized."""
    if _wizard_handler is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _wizard_handler


@router.post("/sessions", status_code=201, summary="Start a wizard session")
def create_session() -> dict:
    try:
        return get_handler().create_session()
    except Exception as e:
        raise to_http_exception(e, "create_session")


@router.get("/sessions/{session_id}", summary="Get wizard session state")
def get_session(session_id: str) -> dict:
    try:
        return get_handler().get_session(session_id)
    except Exception as e:
        raise to_http_exception(e, "get_session")


@router.patch(
    "/sessions/{session_id}/sections/{section}",
    summary="Update a draft section",
    description="Objects are merged into the section; lists replace it. Never changes the current step.",
)
def update_section(session_id: str, section: str, value: Any = Body(...)) -> dict:
    try:
        return get_handler().update_section(session_id, section, value)
    except Exception as e:
        raise to_http_exception(e, "update_section")


@router.post(
    "/sessions/{session_id}/files/{field_path}",
    summary="Attach a file",
    description='field_path is dotted, e.g. "business_info.logo", "dishes.0.image", "menus.1.file" or "photos".',
)
async def upload_file(session_id: str, field_path: str, file: UploadFile = File(...)) -> dict:
    try:
        data = await file.read()
        return get_handler().upload_file(session_id, field_path, file.filename, file.content_type, data)
    except Exception as e:
        raise to_http_exception(e, "upload_file")


@router.delete("/sessions/{session_id}/files/{field_path}", summary="Remove a file")
def remove_file(session_id: str, field_path: str) -> dict:
    try:
        return get_handler().remove_file(session_id, field_path)
    except Exception as e:
        raise to_http_exception(e, "remove_file")


@router.post(
    "/sessions/{session_id}/next",
    summary="Next step",
    description="On the last step this submits the draft; submission_id is set on success.",
)
async def next_step(session_id: str) -> dict:
    try:
        return await get_handler().next_step(session_id)
    except Exception as e:
        raise to_http_exception(e, "next_step")


@router.post("/sessions/{session_id}/back", summary="Previous step")
def previous_step(session_id: str) -> dict:
    try:
        return get_handler().previous_step(session_id)
    except Exception as e:
        raise to_http_exception(e, "previous_step")


@router.post("/sessions/{session_id}/goto/{step}", summary="Jump to a step by index or id")
def go_to_step(session_id: str, step: str) -> dict:
    try:
        return get_handler().go_to_step(session_id, step)
    except Exception as e:
        raise to_http_exception(e, "go_to_step")
