"""Unit tests for Pydantic data models."""
import json
import pytest
from pydantic import ValidationError

from onboarding.models import (
    BatchPhotoItem,
    ChildDiff,
    Deal,
    DishRow,
    Draft,
    EditableSubmission,
    MenuUpload,
    PhotoRow,
    Submission,
    SubmissionStatus,
    UploadedFile,
)
from onboarding.models.draft import Fonts


def _file(name="a.jpg", content_type="image/jpeg", data=b"abc"):
    return UploadedFile(filename=name, content_type=content_type, data=data)


class TestUploadedFile:
    def test_bytes_never_serialized(self):
        f = _file(data=b"\x00" * 10)

        assert f.size == 10
        assert "data" not in f.model_dump()
        assert f.summary() == {"filename": "a.jpg", "content_type": "image/jpeg", "size": 10}

    def test_is_image(self):
        assert _file().is_image
        assert not _file("m.pdf", "application/pdf").is_image


class TestDraftModels:
    def test_public_dict_is_json_safe(self):
        draft = Draft()
        draft.business_info.name = "Milano"
        draft.photos = [_file("p.jpg")]

        public = draft.to_public_dict()

        json.dumps(public)
        assert public["business_info"]["name"] == "Milano"
        assert public["photos"] == [{"filename": "p.jpg", "content_type": "image/jpeg", "size": 3}]

    def test_deals_capped_at_five(self):
        draft = Draft()
        draft.deals = [Deal(title=str(i)) for i in range(5)]

        with pytest.raises(ValidationError):
            draft.deals = [Deal(title=str(i)) for i in range(6)]
        assert len(draft.deals) == 5

    def test_menu_accepts_pdf_and_jpeg_only(self):
        MenuUpload(file=_file("m.pdf", "application/pdf"))
        MenuUpload(file=_file("m.jpg", "image/jpeg"))

        with pytest.raises(ValidationError):
            MenuUpload(file=_file("m.png", "image/png"))

    def test_menu_display_category(self):
        assert MenuUpload(category="dinner").display_category == "Dinner"
        assert MenuUpload(category="custom", custom_category_name="Brunch").display_category == "Brunch"
        assert MenuUpload(category="custom").display_category == "Custom"

    def test_fonts_must_be_curated(self):
        assert Fonts(title_font="Lora").title_font == "Lora"
        assert Fonts().title_font == ""
        with pytest.raises(ValidationError):
            Fonts(title_font="Comic Sans MS")

    def test_iter_files_covers_every_slot(self):
        draft = Draft.model_validate(
            {
                "business_info": {"logo": _file("logo.png", "image/png")},
                "dishes": [{"name": "Pizza", "image": _file("pizza.jpg")}, {"name": "No image"}],
                "menus": [{"file": _file("m.pdf", "application/pdf")}],
                "photos": [_file("p1.jpg"), _file("p2.jpg")],
            }
        )

        names = [f.filename for f in draft.iter_files()]

        assert names == ["logo.png", "pizza.jpg", "m.pdf", "p1.jpg", "p2.jpg"]


class TestSubmissionModels:
    def test_submission_defaults(self):
        s = Submission(restaurant_name="Milano")

        assert s.id
        assert s.status == SubmissionStatus.SUBMITTED
        assert s.version == 1
        assert s.about_sections == []

    def test_child_rows_start_at_one(self):
        assert DishRow(submission_id="s1").display_order == 1

    def test_child_diff_is_empty(self):
        assert ChildDiff().is_empty()
        assert not ChildDiff(deletes=["d1"]).is_empty()


class TestEditableSubmission:
    def test_from_records(self):
        submission = Submission(id="s1", restaurant_name="Milano", version=3, logo_url="https://cdn/logo.webp")
        dishes = [DishRow(id="d1", submission_id="s1", name="Pizza", description="Hot", display_order=1)]
        photos = [PhotoRow(id="p1", submission_id="s1", image_url="https://cdn/p1.webp")]

        edited = EditableSubmission.from_records(submission, dishes, [], photos)

        assert edited.id == "s1"
        assert edited.version == 3
        assert edited.restaurant_name == "Milano"
        assert edited.dishes[0].id == "d1"
        assert edited.dishes[0].name == "Pizza"
        assert edited.deals == []
        assert edited.photos[0].image_url == "https://cdn/p1.webp"
        assert not hasattr(edited, "logo_url")

    def test_blank_rows(self):
        edited = EditableSubmission.model_validate(
            {"id": "s1", "version": 1, "dishes": [{"name": "Pizza", "description": " "}, {"name": "A", "description": "B"}]}
        )

        assert [d.is_blank() for d in edited.dishes] == [True, False]


class TestBatchPhotoItem:
    def test_is_valid(self):
        assert BatchPhotoItem(source_path="a.jpg", category="gallery", dish_name="Salle", description="Room").is_valid()
        assert not BatchPhotoItem(source_path="a.jpg", category="gallery", dish_name="Salle").is_valid()
        assert not BatchPhotoItem(source_path="a.jpg", dish_name="Salle", description="Room").is_valid()
        assert not BatchPhotoItem(source_path="a.jpg", category="gallery", dish_name="!!!", description="Room").is_valid()
