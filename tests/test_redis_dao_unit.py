"""Unit tests for Redis submission DAO (mocked, no real Redis needed)."""
import json

import pytest
import redis
from unittest.mock import MagicMock, Mock

from onboarding.dao import RedisSubmissionDAO, SubmissionConflictError, SubmissionNotFoundError
from onboarding.models.submission import (
    ChildDiff,
    DishRow,
    PhotoRow,
    Submission,
    SubmissionBundle,
    SubmissionStatus,
)

SID = "sub-1"


@pytest.fixture
def mock_store():
    """Create a mock RedisStore."""
    return Mock()


@pytest.fixture
def mock_pipe(mock_store):
    """Pipeline returned by store.pipeline(), usable as a context manager."""
    pipe = MagicMock()
    mock_store.pipeline.return_value = pipe
    pipe.__enter__.return_value = pipe
    return pipe


@pytest.fixture
def dao(mock_store):
    return RedisSubmissionDAO(mock_store)


class TestCreate:
    def test_create_writes_parent_index_and_children_in_one_pipeline(self, dao, mock_store, mock_pipe):
        submission = Submission(id=SID, restaurant_name="Milano")
        bundle = SubmissionBundle(
            submission=submission,
            dishes=[DishRow(id="d1", submission_id=SID, name="A", display_order=1)],
            photos=[PhotoRow(id="p1", submission_id=SID, image_url="u", display_order=1)],
        )

        assert dao.create_submission(bundle) == SID

        mock_store.pipeline.assert_called_once_with(transaction=True)
        assert mock_pipe.set.call_args.args[0] == "submission_v1:sub-1"
        mock_pipe.zadd.assert_called_once()
        assert mock_pipe.zadd.call_args.args[0] == "submissions_index_v1"
        hset_keys = [call.args[0] for call in mock_pipe.hset.call_args_list]
        assert hset_keys == ["submission_dishes_v1:sub-1", "submission_photos_v1:sub-1"]
        mock_pipe.execute.assert_called_once()


class TestRead:
    def test_get_submission_missing(self, dao, mock_store):
        mock_store.get.return_value = None
        assert dao.get_submission(SID) is None
        with pytest.raises(SubmissionNotFoundError):
            dao.require_submission(SID)

    def test_children_sorted_by_display_order(self, dao, mock_store):
        mock_store.hgetall.return_value = {
            "d2": DishRow(id="d2", submission_id=SID, name="B", display_order=2).model_dump_json(),
            "d1": DishRow(id="d1", submission_id=SID, name="A", display_order=1).model_dump_json(),
        }

        dishes = dao.get_dishes(SID)

        assert [d.name for d in dishes] == ["A", "B"]
        mock_store.hgetall.assert_called_once_with("submission_dishes_v1:sub-1")

    def test_unknown_child_kind(self, dao):
        with pytest.raises(ValueError):
            dao.get_children(SID, "reviews")

    def test_list_skips_dangling_index_entries(self, dao, mock_store):
        mock_store.zrevrange.return_value = ["s2", "gone"]
        mock_store.get.side_effect = lambda key: (
            Submission(id="s2", restaurant_name="Two").model_dump_json() if key == "submission_v1:s2" else None
        )

        summaries = dao.list_submissions(limit=10)

        assert [s.id for s in summaries] == ["s2"]
        mock_store.zrevrange.assert_called_once_with("submissions_index_v1", 0, 9)


class TestApplyEdit:
    def test_version_match_writes_and_bumps(self, dao, mock_pipe):
        mock_pipe.get.return_value = Submission(id=SID, version=2).model_dump_json()
        diff = ChildDiff(
            inserts=[DishRow(id="new", submission_id=SID, name="C", display_order=1)],
            deletes=["old"],
        )

        updated = dao.apply_edit(SID, {"restaurant_name": "Milano"}, {"dishes": diff}, expected_version=2)

        assert updated.version == 3
        assert updated.restaurant_name == "Milano"
        mock_pipe.watch.assert_called_once_with("submission_v1:sub-1")
        mock_pipe.multi.assert_called_once()
        mock_pipe.hdel.assert_called_once_with("submission_dishes_v1:sub-1", "old")
        assert "new" in mock_pipe.hset.call_args.kwargs["mapping"]
        mock_pipe.execute.assert_called_once()

    def test_stale_version_conflicts(self, dao, mock_pipe):
        mock_pipe.get.return_value = Submission(id=SID, version=5).model_dump_json()

        with pytest.raises(SubmissionConflictError):
            dao.apply_edit(SID, {}, {}, expected_version=4)
        mock_pipe.execute.assert_not_called()

    def test_concurrent_write_conflicts(self, dao, mock_pipe):
        mock_pipe.get.return_value = Submission(id=SID, version=1).model_dump_json()
        mock_pipe.execute.side_effect = redis.WatchError()

        with pytest.raises(SubmissionConflictError):
            dao.apply_edit(SID, {}, {}, expected_version=1)

    def test_missing_submission(self, dao, mock_pipe):
        mock_pipe.get.return_value = None
        with pytest.raises(SubmissionNotFoundError):
            dao.apply_edit(SID, {}, {}, expected_version=1)


class TestMarkLive:
    def test_marks_live(self, dao, mock_pipe):
        mock_pipe.get.return_value = Submission(id=SID).model_dump_json()

        result = dao.mark_live(SID)

        assert result.status == SubmissionStatus.LIVE
        assert result.version == 2
        mock_pipe.execute.assert_called_once()

    def test_already_live_is_unchanged(self, dao, mock_pipe):
        mock_pipe.get.return_value = Submission(id=SID, status=SubmissionStatus.LIVE).model_dump_json()

        result = dao.mark_live(SID)

        assert result.version == 1
        mock_pipe.execute.assert_not_called()


class TestOrphans:
    def test_enqueue_and_pop(self, dao, mock_store):
        dao.enqueue_orphans([("restaurant-images", "photos/1-photo-0.jpg")])

        key, payload = mock_store.rpush.call_args.args
        assert key == "orphan_uploads_v1"
        assert json.loads(payload) == {"bucket": "restaurant-images", "key": "photos/1-photo-0.jpg"}

        mock_store.lpop.return_value = [payload]
        assert dao.pop_orphans(10) == [("restaurant-images", "photos/1-photo-0.jpg")]
        mock_store.lpop.assert_called_once_with("orphan_uploads_v1", 10)

    def test_enqueue_nothing(self, dao, mock_store):
        dao.enqueue_orphans([])
        mock_store.rpush.assert_not_called()
