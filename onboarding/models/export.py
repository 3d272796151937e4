"""Export document models.

The export document is the interchange format for downstream consumers (site
generator, notification attachment). Field names are stable; new sections are
only ever added.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

EXPORT_VERSION = "1.1"


class ExportRestaurant(BaseModel):
    id: str
    name: str
    address: str
    email: str
    phone: str
    website: str
    online_ordering_url: str
    logo_url: Optional[str] = None
    hero_image_url: Optional[str] = None
    founded_year: str
    story: str
    owner_quote: str
    about_image_url: Optional[str] = None
    menu_pdf_url: Optional[str] = None
    title_font: str = ""
    paragraph_font: str = ""
    status: str
    created_at: datetime
    updated_at: datetime


class ExportOperations(BaseModel):
    hours: str
    delivery_areas: str
    delivery_instructions: str


class ExportSocialMedia(BaseModel):
    instagram: str
    facebook: str
    twitter: str


class ExportDish(BaseModel):
    id: str
    name: str
    description: str
    image_url: Optional[str] = None
    display_order: int


class ExportDeal(BaseModel):
    id: str
    title: str
    description: str
    image_url: Optional[str] = None
    display_order: int


class ExportPhoto(BaseModel):
    id: str
    image_url: str
    display_order: int


class ExportMenu(BaseModel):
    id: str
    category: str
    custom_category_name: Optional[str] = None
    name: str
    file_url: Optional[str] = None
    display_order: int


class ExportFaq(BaseModel):
    question: str
    answer: str
    display_order: int


class ExportAboutSection(BaseModel):
    title: str
    description: str
    image_url: Optional[str] = None
    position: int


class ExportMetadata(BaseModel):
    exported_at: datetime
    export_version: str = EXPORT_VERSION


class ExportDocument(BaseModel):
    restaurant: ExportRestaurant
    operations: ExportOperations
    social_media: ExportSocialMedia
    popular_dishes: list[ExportDish]
    deals: list[ExportDeal]
    photos: list[ExportPhoto]
    menus: list[ExportMenu] = []
    faqs: list[ExportFaq] = []
    about_sections: list[ExportAboutSection] = []
    additional_comments: str = ""
    export_metadata: ExportMetadata
