"""Captioning assist and batch photo models."""
from typing import Literal, Optional

from pydantic import BaseModel

from onboarding.utils.filenames import sanitize

PhotoCategory = Literal["popular-dishes", "gallery", "deals", "menu"]
CaptionLanguage = Literal["en", "fr"]


class CaptionSuggestion(BaseModel):
    """Advisory name/description suggested by the vision model."""
    dish_name: str = ""
    description: str = ""
    suggested_category: Optional[str] = None


class BatchPhotoItem(BaseModel):
    """One image of a batch optimize run, as described by the operator."""
    source_path: str
    category: str = ""
    dish_name: str = ""
    description: str = ""

    def is_valid(self) -> bool:
        """Category, a name that yields a non-empty slug, and a description."""
        return bool(self.category and sanitize(self.dish_name) and self.description.strip())


class BatchPhotoResult(BaseModel):
    original_filename: str
    seo_filename: str = ""
    category: str = ""
    dish_name: str = ""
    description: str = ""
    output_path: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    skipped_reason: Optional[str] = None
