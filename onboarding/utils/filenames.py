"""SEO-friendly filename helpers.

Slugs are ASCII only: accents are folded, anything outside [a-z0-9 -] is
dropped and whitespace becomes a single hyphen.
"""
import re
import unicodedata
from datetime import datetime
from typing import Optional

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

# Category -> filename template. {name} and {brand} are slugs.
SEO_FILENAME_TEMPLATES: dict[str, str] = {
    "popular-dishes": "{name}-{brand}.webp",
    "gallery": "{brand}-{name}.webp",
    "deals": "{name}-deal-{brand}.webp",
    "menu": "menu-{brand}-{year}.webp",
}
DEFAULT_SEO_TEMPLATE = SEO_FILENAME_TEMPLATES["popular-dishes"]

CATEGORY_SUGGESTIONS: dict[str, list[str]] = {
    "popular-dishes": [
        "poutine-poulet-buffalo",
        "sous-marin-steak-philly",
        "pizza-special-milano",
        "penne-poulet-alfredo",
        "ailes-de-poulet",
    ],
    "gallery": [
        "restaurant-interieur",
        "cuisine-milano",
        "salle-manger",
        "terrasse",
        "equipe-milano",
    ],
    "deals": [
        "pizza-special-deal",
        "combo-meal-deal",
        "family-pack-deal",
    ],
    "menu": [
        "menu-complet",
        "carte-plats",
        "menu-principal",
    ],
}


def sanitize(text: Optional[str]) -> str:
    """Turn free text into a lower-case hyphenated slug.

    >>> sanitize("Poutine Poulet Buffalo!")
    'poutine-poulet-buffalo'
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFD", text.lower())
    text = "".join(c for c in text if not unicodedata.combining(c))
    text = _DISALLOWED.sub("", text)
    text = _WHITESPACE.sub("-", text)
    text = _HYPHENS.sub("-", text)
    return text.strip("-")


def build_seo_filename(
    item_name: str,
    category: str,
    brand_token: str,
    year: Optional[int] = None,
) -> str:
    """Build the SEO filename for an image in the given category.

    Unknown categories use the dish template. The menu template embeds the
    year (current year unless given), every other template is deterministic.
    """
    template = SEO_FILENAME_TEMPLATES.get(sanitize(category), DEFAULT_SEO_TEMPLATE)
    return template.format(
        name=sanitize(item_name),
        brand=brand_token,
        year=year if year is not None else datetime.now().year,
    )


def category_suggestions(category: str) -> list[str]:
    """Curated name suggestions for a category (empty when unknown)."""
    return list(CATEGORY_SUGGESTIONS.get(category, []))


def export_filename(restaurant_name: Optional[str]) -> str:
    """Attachment/download name for an exported submission document."""
    base = re.sub(r"[^a-z0-9]", "_", (restaurant_name or "restaurant").lower())
    return f"{base}_submission.json"


def replace_extension(filename: str, extension: str) -> str:
    """Swap the extension of a filename, keeping the base name.

    A name without an extension simply gets one appended.
    """
    base, dot, _ = filename.rpartition(".")
    if not dot or not base:
        base = filename
    return f"{base}.{extension}"
