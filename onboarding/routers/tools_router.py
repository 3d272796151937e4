"""FastAPI routes for captioning assist and SEO naming tools."""
import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile

from onboarding.models.caption import CaptionLanguage, CaptionSuggestion
from onboarding.routers.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/tools", tags=["tools"])

_tools_handler = None


def set_tools_handler(handler):
    """Set the tools handler instance (called during startup)."""
    global _tools_handler
    _tools_handler = handler
    logger.info("[ToolsRouter] Handler injected successfully")


def get_handler():
    if _tools_handler is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _tools_handler


@router.post(
    "/caption",
    response_model=CaptionSuggestion,
    summary="Suggest a name and description for an image",
    description="Advisory only. Fails with 502 when the vision service errors.",
)
async def caption(
    file: UploadFile = File(...),
    category: str = Form("popular-dishes"),
    language: CaptionLanguage = Form("en"),
) -> CaptionSuggestion:
    try:
        data = await file.read()
        return await get_handler().caption(data, file.content_type, category, language)
    except Exception as e:
        raise to_http_exception(e, "caption")


@router.get("/seo-filename", summary="Build the SEO filename for an item")
def seo_filename(
    name: str = Query(..., min_length=1),
    category: str = Query("popular-dishes"),
    year: Optional[int] = Query(None, ge=1900, le=2100),
) -> dict:
    try:
        return get_handler().seo_filename(name, category, year)
    except Exception as e:
        raise to_http_exception(e, "seo_filename")


@router.get("/category-suggestions/{category}", summary="Curated name suggestions")
def category_suggestions(category: str) -> dict:
    try:
        return get_handler().category_suggestions(category)
    except Exception as e:
        raise to_http_exception(e, "category_suggestions")

