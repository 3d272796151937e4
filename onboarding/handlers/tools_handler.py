"""Handler for operator tools: captioning assist and SEO naming."""
import base64
import logging
from typing import Optional

from onboarding.api.openai_caption_client import OpenAICaptionClient
from onboarding.models.caption import CaptionSuggestion
from onboarding.utils.filenames import build_seo_filename, category_suggestions

logger = logging.getLogger(__name__)


class CaptionDisabledError(Exception):
    """Raised when captioning assist is requested but not configured."""


class ToolsHandler:
    def __init__(self, brand_token: str, caption_client: Optional[OpenAICaptionClient] = None):
        self.brand_token = brand_token
        self.caption_client = caption_client

    async def caption(
        self,
        data: bytes,
        content_type: Optional[str],
        category: str,
        language: str,
    ) -> CaptionSuggestion:
        """Suggest a name and description for one image.

        Raises:
            CaptionDisabledError: If no caption client is configured
            CaptionError: If the vision call fails
        """
        if self.caption_client is None:
            raise CaptionDisabledError("captioning assist is not enabled")
        logger.info(f"[ToolsHandler] Caption request: category={category}, language={language}, {len(data)} bytes")
        return await self.caption_client.caption(
            base64.b64encode(data).decode("ascii"),
            category,
            language=language,
            content_type=content_type or "image/jpeg",
        )

    def seo_filename(self, name: str, category: str, year: Optional[int] = None) -> dict:
        return {
            "filename": build_seo_filename(name, category, self.brand_token, year=year),
            "category": category,
        }

    def category_suggestions(self, category: str) -> dict:
        return {"category": category, "suggestions": category_suggestions(category)}
