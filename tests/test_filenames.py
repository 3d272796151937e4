"""Unit tests for SEO filename helpers."""
import pytest

from onboarding.utils.filenames import (
    build_seo_filename,
    category_suggestions,
    export_filename,
    replace_extension,
    sanitize,
)


class TestSanitize:
    def test_example_dish_name(self):
        assert sanitize("Poutine Poulet Buffalo!") == "poutine-poulet-buffalo"

    @pytest.mark.parametrize(
        "text",
        ["Poutine Poulet Buffalo!", "  Crème Brûlée  ", "a -- b", "Sous-marin  Steak Philly", "!!!"],
    )
    def test_idempotent(self, text):
        once = sanitize(text)
        assert sanitize(once) == once

    def test_folds_accents(self):
        assert sanitize("Crème Brûlée") == "creme-brulee"

    def test_collapses_hyphens_and_trims(self):
        assert sanitize("  -Pizza -- Special-  ") == "pizza-special"

    def test_empty_and_none(self):
        assert sanitize("") == ""
        assert sanitize(None) == ""
        assert sanitize("!!!") == ""


class TestBuildSeoFilename:
    def test_popular_dishes(self):
        assert build_seo_filename("Pizza Special", "popular-dishes", "milano") == "pizza-special-milano.webp"

    def test_gallery(self):
        assert build_seo_filename("x", "gallery", "milano") == "milano-x.webp"

    def test_deals(self):
        assert build_seo_filename("Family Pack", "deals", "milano") == "family-pack-deal-milano.webp"

    def test_menu_uses_year(self):
        assert build_seo_filename("anything", "menu", "milano", year=2025) == "menu-milano-2025.webp"

    def test_unknown_category_uses_dish_template(self):
        assert build_seo_filename("Wings", "vegan", "milano") == "wings-milano.webp"

    def test_deterministic(self):
        assert build_seo_filename("Pizza", "gallery", "milano") == build_seo_filename("Pizza", "gallery", "milano")


class TestMiscHelpers:
    def test_category_suggestions(self):
        assert "pizza-special-milano" in category_suggestions("popular-dishes")
        assert category_suggestions("unknown") == []

    def test_category_suggestions_returns_copy(self):
        category_suggestions("deals").append("mutated")
        assert "mutated" not in category_suggestions("deals")

    def test_export_filename(self):
        assert export_filename("Milano Pizza & Co.") == "milano_pizza___co__submission.json"

    def test_replace_extension(self):
        assert replace_extension("photo.JPG", "webp") == "photo.webp"
        assert replace_extension("archive.tar.gz", "webp") == "archive.tar.webp"
        assert replace_extension("noext", "png") == "noext.png"
        assert replace_extension(".hidden", "png") == ".hidden.png"
