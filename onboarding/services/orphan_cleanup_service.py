"""Deletes uploads left behind by submissions that failed to persist."""
import logging

from botocore.exceptions import BotoCoreError, ClientError

from onboarding.api.s3_client import S3Client
from onboarding.dao.redis_submission_dao import RedisSubmissionDAO
from onboarding.metrics import ORPHAN_UPLOADS_CLEANED

logger = logging.getLogger(__name__)


class OrphanCleanupService:
    """Drains the orphan upload queue in batches."""

    def __init__(self, submission_dao: RedisSubmissionDAO, s3_client: S3Client, batch_size: int = 50):
        self.submission_dao = submission_dao
        self.s3_client = s3_client
        self.batch_size = batch_size

    async def cleanup(self) -> int:
        """Delete one batch of orphaned objects.

        Objects whose deletion fails are queued again for the next run.

        Returns:
            Number of objects deleted
        """
        entries = self.submission_dao.pop_orphans(self.batch_size)
        if not entries:
            logger.debug("[OrphanCleanup] Nothing to clean up")
            return 0

        deleted = 0
        failed: list[tuple[str, str]] = []
        for bucket, key in entries:
            try:
                await self.s3_client.delete_object(bucket, key)
                deleted += 1
                ORPHAN_UPLOADS_CLEANED.labels(result="deleted").inc()
            except (ClientError, BotoCoreError) as e:
                failed.append((bucket, key))
                ORPHAN_UPLOADS_CLEANED.labels(result="error").inc()
                logger.warning(f"[OrphanCleanup] Could not delete {bucket}/{key}, requeueing: {e}")

        if failed:
            self.submission_dao.enqueue_orphans(failed)

        logger.info(f"[OrphanCleanup] Deleted {deleted}/{len(entries)} orphaned upload(s)")
        return deleted
