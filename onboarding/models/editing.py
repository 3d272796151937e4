"""Admin edit buffer models."""
from typing import Optional

from pydantic import BaseModel, Field

from onboarding.models.submission import (
    DealRow,
    DishRow,
    PhotoRow,
    Submission,
)


class EditableDish(BaseModel):
    """Dish in the edit buffer. id is None for rows added during the edit."""
    id: Optional[str] = None
    name: str = ""
    description: str = ""
    image_url: Optional[str] = None

    def is_blank(self) -> bool:
        return not (self.name.strip() and self.description.strip())


class EditableDeal(BaseModel):
    id: Optional[str] = None
    title: str = ""
    description: str = ""
    image_url: Optional[str] = None

    def is_blank(self) -> bool:
        return not (self.title.strip() and self.description.strip())


class EditableSubmission(BaseModel):
    """Editable copy of a persisted submission.

    version is the parent's version at load time; save() refuses to write
    when the stored version has moved on.
    """
    id: str
    version: int
    restaurant_name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    online_ordering_url: str = ""
    founded_year: str = ""
    story: str = ""
    owner_quote: str = ""
    hours: str = ""
    delivery_areas: str = ""
    delivery_instructions: str = ""
    instagram: str = ""
    facebook: str = ""
    twitter: str = ""
    comments: str = ""
    dishes: list[EditableDish] = Field(default_factory=list)
    deals: list[EditableDeal] = Field(default_factory=list)
    # Read-only in the editor
    photos: list[PhotoRow] = Field(default_factory=list)

    @classmethod
    def from_records(
        cls,
        submission: Submission,
        dishes: list[DishRow],
        deals: list[DealRow],
        photos: list[PhotoRow],
    ) -> "EditableSubmission":
        data = submission.model_dump(include=set(cls.model_fields) - {"dishes", "deals", "photos"})
        return cls(
            **data,
            dishes=[EditableDish(**d.model_dump(include={"id", "name", "description", "image_url"})) for d in dishes],
            deals=[EditableDeal(**d.model_dump(include={"id", "title", "description", "image_url"})) for d in deals],
            photos=photos,
        )
