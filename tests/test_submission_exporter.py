"""Unit tests for the submission exporter."""
import json
from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import Mock

from onboarding.dao.redis_submission_dao import SubmissionNotFoundError
from onboarding.models.submission import (
    AboutSectionRecord,
    DealRow,
    DishRow,
    FaqRow,
    MenuRow,
    PhotoRow,
    Submission,
    SubmissionBundle,
)
from onboarding.services.submission_exporter import SubmissionExporter

SID = "sub-1"
CREATED = datetime(2025, 6, 1, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def bundle():
    return SubmissionBundle(
        submission=Submission(
            id=SID,
            restaurant_name="Milano Pizza",
            address="1 Main St",
            email="m@x.com",
            hours="11-23",
            instagram="@milano",
            comments="Thanks",
            menu_pdf_url="https://x/menu.pdf",
            about_sections=[
                AboutSectionRecord(title="Later", position=5),
                AboutSectionRecord(title="First", position=1),
            ],
            created_at=CREATED,
            updated_at=CREATED,
        ),
        dishes=[DishRow(id="d1", submission_id=SID, name="Pizza", description="Cheesy", display_order=1)],
        deals=[DealRow(id="e1", submission_id=SID, title="Combo", description="2 for 1", display_order=1)],
        photos=[PhotoRow(id="p1", submission_id=SID, image_url="https://x/p1.webp", display_order=1)],
        menus=[MenuRow(id="m1", submission_id=SID, category="lunch", file_url="https://x/menu.pdf")],
        faqs=[FaqRow(id="f1", submission_id=SID, question="Parking?", answer="Yes")],
    )


@pytest.fixture
def mock_dao(bundle):
    dao = Mock()
    dao.get_bundle.return_value = bundle
    return dao


class TestSubmissionExporter:
    def test_document_sections(self, mock_dao):
        exporter = SubmissionExporter(mock_dao)

        doc = exporter.export(SID)

        assert doc["restaurant"]["name"] == "Milano Pizza"
        assert doc["restaurant"]["menu_pdf_url"] == "https://x/menu.pdf"
        assert doc["restaurant"]["status"] == "submitted"
        assert doc["operations"]["hours"] == "11-23"
        assert doc["social_media"]["instagram"] == "@milano"
        assert doc["popular_dishes"][0]["name"] == "Pizza"
        assert doc["deals"][0]["title"] == "Combo"
        assert doc["photos"][0]["image_url"] == "https://x/p1.webp"
        assert doc["menus"][0]["category"] == "lunch"
        assert doc["faqs"] == [{"question": "Parking?", "answer": "Yes", "display_order": 1}]
        assert [s["title"] for s in doc["about_sections"]] == ["First", "Later"]
        assert doc["additional_comments"] == "Thanks"
        assert doc["export_metadata"]["export_version"] == "1.1"

    def test_exports_differ_only_in_timestamp(self, mock_dao):
        ticks = iter([CREATED, CREATED + timedelta(minutes=5)])
        exporter = SubmissionExporter(mock_dao, clock=lambda: next(ticks))

        first = exporter.export(SID)
        second = exporter.export(SID)

        assert first["export_metadata"]["exported_at"] != second["export_metadata"]["exported_at"]
        first.pop("export_metadata")
        second.pop("export_metadata")
        assert first == second
        # Always a fresh read
        assert mock_dao.get_bundle.call_count == 2

    def test_export_json_download(self, mock_dao):
        filename, content = SubmissionExporter(mock_dao).export_json(SID)

        assert filename == "milano_pizza_submission.json"
        assert json.loads(content)["restaurant"]["id"] == SID

    def test_missing_submission(self, mock_dao):
        mock_dao.get_bundle.side_effect = SubmissionNotFoundError(SID)

        with pytest.raises(SubmissionNotFoundError):
            SubmissionExporter(mock_dao).export(SID)
