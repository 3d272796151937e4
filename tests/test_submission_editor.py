"""Unit tests for the admin submission editor."""
import pytest
from unittest.mock import Mock

from onboarding.dao.redis_submission_dao import SubmissionConflictError
from onboarding.models.editing import EditableDeal, EditableDish
from onboarding.models.submission import (
    DealRow,
    DishRow,
    PhotoRow,
    Submission,
    SubmissionStatus,
)
from onboarding.services.submission_editor import SubmissionEditor

SID = "sub-1"


@pytest.fixture
def submission():
    return Submission(id=SID, restaurant_name="Milano", email="m@x.com", version=3)


@pytest.fixture
def stored_dishes():
    return [
        DishRow(id="dish-a", submission_id=SID, name="A", description="a", display_order=1),
        DishRow(id="dish-b", submission_id=SID, name="B", description="b", display_order=2),
    ]


@pytest.fixture
def mock_dao(submission, stored_dishes):
    dao = Mock()
    dao.require_submission.return_value = submission
    dao.get_dishes.return_value = stored_dishes
    dao.get_deals.return_value = []
    dao.get_photos.return_value = [PhotoRow(id="p1", submission_id=SID, image_url="https://x/p1.webp")]
    return dao


@pytest.fixture
def editor(mock_dao):
    return SubmissionEditor(mock_dao)


def applied_diffs(mock_dao):
    mock_dao.apply_edit.assert_called_once()
    return mock_dao.apply_edit.call_args.args[2]


class TestLoad:
    def test_load_builds_edit_buffer(self, editor):
        edited = editor.load(SID)

        assert edited.id == SID
        assert edited.version == 3
        assert edited.restaurant_name == "Milano"
        assert [d.id for d in edited.dishes] == ["dish-a", "dish-b"]
        assert edited.photos[0].image_url == "https://x/p1.webp"


class TestSave:
    def test_removing_first_dish_renumbers(self, editor, mock_dao):
        edited = editor.load(SID)
        edited.dishes = [edited.dishes[1]]

        editor.save(edited)

        diff = applied_diffs(mock_dao)["dishes"]
        assert diff.deletes == ["dish-a"]
        assert diff.inserts == []
        assert len(diff.updates) == 1
        assert diff.updates[0].id == "dish-b"
        assert diff.updates[0].display_order == 1

    def test_unchanged_rows_are_not_rewritten(self, editor, mock_dao):
        editor.save(editor.load(SID))

        diff = applied_diffs(mock_dao)["dishes"]
        assert diff.is_empty()

    def test_new_rows_inserted_and_blank_dropped(self, editor, mock_dao):
        edited = editor.load(SID)
        edited.dishes.append(EditableDish(name="C", description="c"))
        edited.dishes.append(EditableDish(name="  ", description="no name"))
        edited.deals = [EditableDeal(title="Combo", description="2 for 1"), EditableDeal(title="Blank")]

        editor.save(edited)

        diffs = applied_diffs(mock_dao)
        assert [(r.name, r.display_order) for r in diffs["dishes"].inserts] == [("C", 3)]
        assert all(r.submission_id == SID for r in diffs["dishes"].inserts)
        assert [(r.title, r.display_order) for r in diffs["deals"].inserts] == [("Combo", 1)]

    def test_reorder_updates_display_order(self, editor, mock_dao):
        edited = editor.load(SID)
        edited.dishes.reverse()

        editor.save(edited)

        updates = {r.id: r.display_order for r in applied_diffs(mock_dao)["dishes"].updates}
        assert updates == {"dish-b": 1, "dish-a": 2}

    def test_scalar_fields_and_version_passed(self, editor, mock_dao):
        edited = editor.load(SID)
        edited.restaurant_name = "Milano Pizza"

        editor.save(edited)

        args = mock_dao.apply_edit.call_args
        assert args.args[0] == SID
        assert args.args[1]["restaurant_name"] == "Milano Pizza"
        assert "status" not in args.args[1]
        assert args.kwargs["expected_version"] == 3

    def test_conflict_propagates(self, editor, mock_dao):
        mock_dao.apply_edit.side_effect = SubmissionConflictError("stale")

        with pytest.raises(SubmissionConflictError):
            editor.save(editor.load(SID))

    def test_deal_rows_keep_existing_ids(self, editor, mock_dao):
        mock_dao.get_deals.return_value = [
            DealRow(id="deal-1", submission_id=SID, title="Old", description="d", display_order=1)
        ]
        edited = editor.load(SID)
        edited.deals[0].title = "New"

        editor.save(edited)

        diff = applied_diffs(mock_dao)["deals"]
        assert [(r.id, r.title) for r in diff.updates] == [("deal-1", "New")]
        assert diff.deletes == []


class TestMarkLive:
    def test_mark_live_delegates(self, editor, mock_dao, submission):
        mock_dao.mark_live.return_value = submission.model_copy(update={"status": SubmissionStatus.LIVE})

        result = editor.mark_live(SID)

        assert result.status == SubmissionStatus.LIVE
        mock_dao.mark_live.assert_called_once_with(SID)

    def test_list_submissions(self, editor, mock_dao):
        mock_dao.list_submissions.return_value = []
        mock_dao.count_submissions.return_value = 0

        assert editor.list_submissions(limit=10, offset=0) == ([], 0)
        mock_dao.list_submissions.assert_called_once_with(limit=10, offset=0)
