"""Unit tests for the OpenAI captioning client."""
import pytest
from unittest.mock import AsyncMock, Mock, patch

from onboarding.api.openai_caption_client import CaptionError, OpenAICaptionClient


@pytest.fixture
def caption_client():
    return OpenAICaptionClient(api_key="test-key", brand_name="Milano Pizza Gatineau", city="Gatineau")


def completion(text: str):
    response = Mock()
    response.choices = [Mock(message=Mock(content=text))]
    response.usage = Mock(total_tokens=42)
    return response


class TestOpenAICaptionClient:
    @pytest.mark.asyncio
    async def test_parses_json_answer(self, caption_client):
        answer = '```json\n{"dishName": "Poutine Buffalo", "description": "Crispy", "suggestedCategory": "popular-dishes"}\n```'
        with patch.object(
            caption_client.client.chat.completions, "create", new_callable=AsyncMock
        ) as mock_create:
            mock_create.return_value = completion(answer)

            suggestion = await caption_client.caption("aGVsbG8=", "popular-dishes", language="fr")

        assert suggestion.dish_name == "Poutine Buffalo"
        assert suggestion.description == "Crispy"
        assert suggestion.suggested_category == "popular-dishes"

        messages = mock_create.call_args.kwargs["messages"]
        assert "French" in messages[0]["content"]
        user_content = messages[1]["content"]
        assert user_content[0]["text"].startswith("Analysez cette image")
        assert user_content[1]["image_url"]["url"] == "data:image/jpeg;base64,aGVsbG8="

    @pytest.mark.asyncio
    async def test_non_json_answer_falls_back(self, caption_client):
        with patch.object(
            caption_client.client.chat.completions, "create", new_callable=AsyncMock
        ) as mock_create:
            mock_create.return_value = completion("A lovely pizza with basil.")

            suggestion = await caption_client.caption("aGVsbG8=", None)

        assert suggestion.dish_name == "AI-Generated Dish"
        assert suggestion.description == "A lovely pizza with basil."
        assert suggestion.suggested_category == "popular-dishes"

    @pytest.mark.asyncio
    async def test_api_error_raises_caption_error(self, caption_client):
        with patch.object(
            caption_client.client.chat.completions, "create", new_callable=AsyncMock
        ) as mock_create:
            mock_create.side_effect = RuntimeError("rate limited")

            with pytest.raises(CaptionError):
                await caption_client.caption("aGVsbG8=", "gallery")

    def test_menu_prompt_has_year_and_brand(self, caption_client):
        prompt = caption_client.build_user_prompt("menu", "en", 2025)
        assert prompt == "Analyze this menu image and create a descriptive caption. Format: \"Complete Milano Pizza Gatineau menu 2025.\""

    def test_unknown_category_prompt(self, caption_client):
        prompt = caption_client.build_user_prompt("vegan", "fr", 2025)
        assert "Milano Pizza Gatineau" in prompt
        assert "French" in prompt
