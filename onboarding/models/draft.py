"""Wizard draft models.

A draft is the in-memory, not yet persisted submission owned by one wizard
session. File fields always hold the uploaded bytes (UploadedFile), never a
storage URL; URLs only exist on the persisted Submission.
"""
import uuid
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_DEALS = 5
MIN_DEALS_SUGGESTED = 2
MAX_CUSTOM_SECTIONS = 10

MENU_CONTENT_TYPES = {"application/pdf", "image/jpeg", "image/jpg"}

CURATED_FONTS: dict[str, str] = {
    "Inter": "Sans-serif",
    "Playfair Display": "Serif",
    "Montserrat": "Sans-serif",
    "Lora": "Serif",
    "Open Sans": "Sans-serif",
    "Poppins": "Sans-serif",
    "Merriweather": "Serif",
    "Roboto": "Sans-serif",
    "Source Sans Pro": "Sans-serif",
    "Crimson Text": "Serif",
}


def new_item_id() -> str:
    """Stable id of a list item (dish, deal, menu, custom section) within a draft."""
    return uuid.uuid4().hex


class UploadedFile(BaseModel):
    """A file received from the user, held in memory until persisted."""
    filename: str
    content_type: str = "application/octet-stream"
    data: bytes = Field(default=b"", exclude=True, repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")

    def summary(self) -> dict:
        """JSON-safe description used when echoing draft state."""
        return {"filename": self.filename, "content_type": self.content_type, "size": self.size}


class BusinessInfo(BaseModel):
    name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    online_ordering_url: str = ""
    logo: Optional[UploadedFile] = None
    hero_image: Optional[UploadedFile] = None


class CustomSection(BaseModel):
    """Extra "about" block placed at a chosen position on the page."""
    id: str = Field(default_factory=new_item_id)
    title: str = ""
    description: str = ""
    image: Optional[UploadedFile] = None
    position: int = Field(default=1, ge=1, le=MAX_CUSTOM_SECTIONS)


class About(BaseModel):
    founded_year: str = ""
    story: str = ""
    owner_quote: str = ""
    about_image: Optional[UploadedFile] = None
    custom_sections: list[CustomSection] = Field(default_factory=list, max_length=MAX_CUSTOM_SECTIONS)


class Dish(BaseModel):
    id: str = Field(default_factory=new_item_id)
    name: str = ""
    description: str = ""
    image: Optional[UploadedFile] = None


class Deal(BaseModel):
    id: str = Field(default_factory=new_item_id)
    title: str = ""
    description: str = ""
    image: Optional[UploadedFile] = None


class MenuUpload(BaseModel):
    """One menu file (breakfast, lunch, dinner or a custom-labelled menu)."""
    id: str = Field(default_factory=new_item_id)
    category: Literal["breakfast", "lunch", "dinner", "custom"] = "lunch"
    custom_category_name: Optional[str] = None
    name: str = ""
    file: Optional[UploadedFile] = None

    @field_validator("file")
    @classmethod
    def check_menu_file_type(cls, v: Optional[UploadedFile]) -> Optional[UploadedFile]:
        """Menus are accepted as PDF or JPEG only."""
        if v is not None and v.content_type not in MENU_CONTENT_TYPES:
            raise ValueError(f"menu file must be PDF or JPEG, got {v.content_type}")
        return v

    @property
    def display_category(self) -> str:
        if self.category == "custom":
            return self.custom_category_name or "Custom"
        return self.category.capitalize()


class DeliveryHours(BaseModel):
    hours: str = ""
    delivery_areas: str = ""
    instructions: str = ""


class Social(BaseModel):
    instagram: str = ""
    facebook: str = ""
    twitter: str = ""
    comments: str = ""


class Fonts(BaseModel):
    title_font: str = ""
    paragraph_font: str = ""

    @field_validator("title_font", "paragraph_font")
    @classmethod
    def check_curated(cls, v: str) -> str:
        if v and v not in CURATED_FONTS:
            raise ValueError(f"unknown font {v!r}")
        return v


class Faq(BaseModel):
    question: str = ""
    answer: str = ""


class Draft(BaseModel):
    """The whole wizard form, one attribute per section."""
    business_info: BusinessInfo = Field(default_factory=BusinessInfo)
    about: About = Field(default_factory=About)
    dishes: list[Dish] = Field(default_factory=list)
    deals: list[Deal] = Field(default_factory=list, max_length=MAX_DEALS)
    menus: list[MenuUpload] = Field(default_factory=list)
    delivery_hours: DeliveryHours = Field(default_factory=DeliveryHours)
    photos: list[UploadedFile] = Field(default_factory=list)
    fonts: Fonts = Field(default_factory=Fonts)
    faqs: list[Faq] = Field(default_factory=list)
    social: Social = Field(default_factory=Social)

    model_config = ConfigDict(validate_assignment=True)

    def iter_files(self):
        """Yield every attached file in the draft."""
        for f in (self.business_info.logo, self.business_info.hero_image, self.about.about_image):
            if f is not None:
                yield f
        for section in self.about.custom_sections:
            if section.image is not None:
                yield section.image
        for item in (*self.dishes, *self.deals):
            if item.image is not None:
                yield item.image
        for menu in self.menus:
            if menu.file is not None:
                yield menu.file
        yield from self.photos

    def to_public_dict(self) -> dict:
        """Draft as JSON-safe data, files replaced by their summaries."""
        return _public(self)


def _public(value):
    if isinstance(value, UploadedFile):
        return value.summary()
    if isinstance(value, BaseModel):
        return {name: _public(getattr(value, name)) for name in type(value).model_fields}
    if isinstance(value, list):
        return [_public(v) for v in value]
    return value
