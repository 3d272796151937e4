"""OpenAI GPT-4o vision client for image captioning assist.

Sends a single restaurant image (base64) to GPT-4o and asks for a suggested
dish/item name, an SEO description and a category. Purely advisory: callers
surface failures to the user and carry on with manual entry.
"""
import json
import logging
import re
import time
from datetime import datetime
from typing import Optional

from openai import AsyncOpenAI

from onboarding.models.caption import CaptionSuggestion
from onboarding.metrics import (
    OPENAI_API_CALLS_TOTAL,
    OPENAI_API_CALL_DURATION_SECONDS,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "popular-dishes"
FALLBACK_DISH_NAME = "AI-Generated Dish"

CATEGORY_PROMPTS = {
    "en": {
        "popular-dishes": (
            "Analyze this food image and create an appetizing description for {brand}. "
            "Include visible ingredients, cooking style, and presentation. Make it SEO-friendly "
            'for a restaurant menu. Format: "Enjoy our [dish name]: [detailed description]. '
            'Perfect for [context], available for dine-in, takeout, or delivery in {city}."'
        ),
        "gallery": (
            "Describe this restaurant photo from {brand} focusing on ambiance, food presentation, "
            'or dining experience. Format: "Photo of [description] at {brand}."'
        ),
        "deals": (
            "Create a promotional description for this food/offer image at {brand} that emphasizes "
            'value and appeal. Format: "Special deal at {brand}: [description]. Limited time offer, '
            'available for dine-in, takeout, or delivery."'
        ),
        "menu": (
            'Analyze this menu image and create a descriptive caption. Format: "Complete {brand} menu {year}."'
        ),
    },
    "fr": {
        "popular-dishes": (
            "Analysez cette image de plat et créez une description appétissante pour {brand}. "
            "Incluez les ingrédients visibles, le style de cuisson et la présentation. Rendez-la SEO "
            'pour un menu de restaurant. Format: "Savourez notre [nom du plat]: [description détaillée]. '
            'Parfait pour [contexte], disponible en salle, à emporter ou en livraison à {city}."'
        ),
        "gallery": (
            "Décrivez cette photo de restaurant de {brand} en mettant l'accent sur l'ambiance, la "
            "présentation des plats ou l'expérience culinaire. "
            'Format: "Photo de [description] chez {brand}."'
        ),
        "deals": (
            "Créez une description promotionnelle pour cette image d'offre/plat chez {brand} qui met "
            "l'accent sur la valeur et l'attrait. Format: \"Offre spéciale chez {brand}: [description]. "
            'Promotion à durée limitée, disponible en salle, à emporter ou en livraison."'
        ),
        "menu": (
            'Analysez cette image de menu et créez une légende descriptive. Format: "Menu complet {brand} {year}."'
        ),
    },
}

SYSTEM_PROMPT = """You are an expert food photographer and SEO content writer for {brand}, a restaurant in {city}. Your task is to analyze food and restaurant images and generate compelling, SEO-optimized descriptions.

Key guidelines:
- Always mention {brand} naturally in the description
- Include location context ({city}) for local SEO
- Use appetizing, descriptive language for food items
- Identify specific ingredients and cooking methods visible
- Suggest realistic dish names based on what you see
- Keep descriptions natural and engaging, not keyword-stuffed
- Use the language specified ({language_name})

Also provide:
1. A suggested dish/item name based on the image
2. A suggested category if none provided
3. The SEO-optimized description following the format template"""

RESPONSE_FORMAT_HINT = (
    'Please respond with JSON format: {"dishName": "suggested dish name", '
    '"description": "SEO description", "suggestedCategory": "category if not provided"}'
)


class CaptionError(Exception):
    """Raised when the vision service cannot produce a caption."""


class OpenAICaptionClient:
    """Async client for OpenAI GPT-4o image captioning."""

    def __init__(
        self,
        api_key: str,
        brand_name: str,
        city: str,
        model: str = "gpt-4o",
    ):
        self.model = model
        self.brand_name = brand_name
        self.city = city
        self.client = AsyncOpenAI(api_key=api_key)

    async def close(self):
        """Close the OpenAI client."""
        await self.client.close()

    def build_user_prompt(self, category: Optional[str], language: str, year: int) -> str:
        prompts = CATEGORY_PROMPTS.get(language, CATEGORY_PROMPTS["en"])
        template = prompts.get(category or "")
        if template is None:
            language_name = "French" if language == "fr" else "English"
            template = f"Analyze this image and provide an SEO-optimized description for {{brand}} in {language_name}."
        return template.format(brand=self.brand_name, city=self.city, year=year)

    async def caption(
        self,
        image_base64: str,
        category: Optional[str],
        language: str = "en",
        year: Optional[int] = None,
        content_type: str = "image/jpeg",
    ) -> CaptionSuggestion:
        """Suggest a name, description and category for an image.

        Args:
            image_base64: Base64 encoded image bytes (no data: prefix)
            category: popular-dishes | gallery | deals | menu, or None
            language: "en" or "fr"
            year: Year used by the menu prompt (defaults to now)
            content_type: MIME type used in the data URL

        Returns:
            CaptionSuggestion

        Raises:
            CaptionError: If the API call fails
        """
        system_prompt = SYSTEM_PROMPT.format(
            brand=self.brand_name,
            city=self.city,
            language_name="French" if language == "fr" else "English",
        )
        user_prompt = self.build_user_prompt(category, language, year or datetime.now().year)

        start_time = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                max_tokens=500,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": f"{user_prompt}\n\n{RESPONSE_FORMAT_HINT}"},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:{content_type};base64,{image_base64}"},
                            },
                        ],
                    },
                ],
            )
        except Exception as e:
            duration = time.perf_counter() - start_time
            OPENAI_API_CALL_DURATION_SECONDS.labels(endpoint="caption").observe(duration)
            OPENAI_API_CALLS_TOTAL.labels(endpoint="caption", status="error").inc()
            logger.error(f"[OpenAICaption] Caption request failed: {e}")
            raise CaptionError(str(e)) from e

        duration = time.perf_counter() - start_time
        OPENAI_API_CALL_DURATION_SECONDS.labels(endpoint="caption").observe(duration)
        OPENAI_API_CALLS_TOTAL.labels(endpoint="caption", status="success").inc()

        raw_text = response.choices[0].message.content or ""
        logger.info(
            f"[OpenAICaption] Caption complete in {duration:.1f}s, "
            f"tokens: {response.usage.total_tokens if response.usage else '?'}"
        )
        return self._parse_response(raw_text, category)

    def _parse_response(self, raw_text: str, category: Optional[str]) -> CaptionSuggestion:
        """Parse the JSON answer, falling back to the raw text as description."""
        cleaned = raw_text.strip()
        cleaned = re.sub(r"^```(?:json)?\s*", "", cleaned)
        cleaned = re.sub(r"\s*```$", "", cleaned)

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError:
            logger.warning("[OpenAICaption] Non-JSON answer, using raw text as description")
            return CaptionSuggestion(
                dish_name=FALLBACK_DISH_NAME,
                description=raw_text,
                suggested_category=category or DEFAULT_CATEGORY,
            )

        if not isinstance(data, dict):
            return CaptionSuggestion(
                dish_name=FALLBACK_DISH_NAME,
                description=raw_text,
                suggested_category=category or DEFAULT_CATEGORY,
            )

        return CaptionSuggestion(
            dish_name=data.get("dishName") or "",
            description=data.get("description") or "",
            suggested_category=data.get("suggestedCategory") or category,
        )
