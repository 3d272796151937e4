"""Unit tests for the orphan upload cleanup service."""
import pytest
from botocore.exceptions import ClientError
from unittest.mock import AsyncMock, Mock

from onboarding.services.orphan_cleanup_service import OrphanCleanupService


@pytest.fixture
def mock_dao():
    return Mock()


@pytest.fixture
def mock_s3():
    s3 = Mock()
    s3.delete_object = AsyncMock()
    return s3


class TestOrphanCleanupService:
    @pytest.mark.asyncio
    async def test_empty_queue(self, mock_dao, mock_s3):
        mock_dao.pop_orphans.return_value = []

        assert await OrphanCleanupService(mock_dao, mock_s3).cleanup() == 0
        mock_s3.delete_object.assert_not_called()

    @pytest.mark.asyncio
    async def test_deletes_batch(self, mock_dao, mock_s3):
        mock_dao.pop_orphans.return_value = [("b", "k1"), ("b", "k2")]

        deleted = await OrphanCleanupService(mock_dao, mock_s3, batch_size=2).cleanup()

        assert deleted == 2
        mock_dao.pop_orphans.assert_called_once_with(2)
        mock_dao.enqueue_orphans.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_deletes_are_requeued(self, mock_dao, mock_s3):
        mock_dao.pop_orphans.return_value = [("b", "k1"), ("b", "k2")]
        mock_s3.delete_object.side_effect = [
            None,
            ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "DeleteObject"),
        ]

        deleted = await OrphanCleanupService(mock_dao, mock_s3).cleanup()

        assert deleted == 1
        mock_dao.enqueue_orphans.assert_called_once_with([("b", "k2")])
