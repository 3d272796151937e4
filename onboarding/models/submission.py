"""Persisted submission models.

A Submission is the parent record; dishes, deals, photos, menus and FAQs are
child rows referencing it by submission_id. Child rows render in ascending
display_order, which starts at 1 on every write path.

Stored in Redis at:
- submission_v1:{submission_id}                 (parent JSON)
- submission_{kind}_v1:{submission_id}          (hash of row_id -> row JSON)
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

DISPLAY_ORDER_START = 1


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionStatus(str, Enum):
    """submitted -> live, set once by an administrator."""
    SUBMITTED = "submitted"
    LIVE = "live"


class AboutSectionRecord(BaseModel):
    title: str = ""
    description: str = ""
    image_url: Optional[str] = None
    position: int = 1


class Submission(BaseModel):
    """Parent row: scalar fields and single-image URLs."""
    id: str = Field(default_factory=new_id)

    # Business info
    restaurant_name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    online_ordering_url: str = ""
    logo_url: Optional[str] = None
    hero_image_url: Optional[str] = None

    # About
    founded_year: str = ""
    story: str = ""
    owner_quote: str = ""
    about_image_url: Optional[str] = None
    about_sections: list[AboutSectionRecord] = Field(default_factory=list)

    # First menu file, kept for consumers of the single-menu format
    menu_pdf_url: Optional[str] = None

    # Hours & delivery
    hours: str = ""
    delivery_areas: str = ""
    delivery_instructions: str = ""

    # Social & extras
    instagram: str = ""
    facebook: str = ""
    twitter: str = ""
    comments: str = ""

    # Fonts
    title_font: str = ""
    paragraph_font: str = ""

    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    version: int = 1
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# Parent fields an administrator may edit; everything else is owned by the
# submit pipeline or the status transition.
EDITABLE_SUBMISSION_FIELDS = (
    "restaurant_name",
    "address",
    "email",
    "phone",
    "website",
    "online_ordering_url",
    "founded_year",
    "story",
    "owner_quote",
    "hours",
    "delivery_areas",
    "delivery_instructions",
    "instagram",
    "facebook",
    "twitter",
    "comments",
)


class ChildRow(BaseModel):
    id: str = Field(default_factory=new_id)
    submission_id: str
    display_order: int = DISPLAY_ORDER_START


class DishRow(ChildRow):
    name: str = ""
    description: str = ""
    image_url: Optional[str] = None


class DealRow(ChildRow):
    title: str = ""
    description: str = ""
    image_url: Optional[str] = None


class PhotoRow(ChildRow):
    image_url: str


class MenuRow(ChildRow):
    category: str = "lunch"
    custom_category_name: Optional[str] = None
    name: str = ""
    file_url: Optional[str] = None
    content_type: str = ""


class FaqRow(ChildRow):
    question: str = ""
    answer: str = ""


class SubmissionBundle(BaseModel):
    """Parent plus every child collection, written or read as one unit."""
    submission: Submission
    dishes: list[DishRow] = Field(default_factory=list)
    deals: list[DealRow] = Field(default_factory=list)
    photos: list[PhotoRow] = Field(default_factory=list)
    menus: list[MenuRow] = Field(default_factory=list)
    faqs: list[FaqRow] = Field(default_factory=list)


class SubmissionSummary(BaseModel):
    """Row in the admin dashboard listing."""
    id: str
    restaurant_name: str
    email: str
    status: SubmissionStatus
    created_at: datetime


class ChildDiff(BaseModel):
    """Rows to write for one child collection during an admin save."""
    inserts: list[ChildRow] = Field(default_factory=list)
    updates: list[ChildRow] = Field(default_factory=list)
    deletes: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.inserts or self.updates or self.deletes)
