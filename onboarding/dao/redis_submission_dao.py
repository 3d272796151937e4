"""Redis-based Data Access Object for restaurant submissions.

Tables are modelled as keys:
- submission_v1:{id}                      parent row (JSON)
- submission_{kind}_v1:{id}               child rows, hash of row_id -> JSON
- submissions_index_v1                    sorted set of ids scored by created_at
- orphan_uploads_v1                       list of {"bucket", "key"} awaiting deletion

Every multi-key write goes through one MULTI/EXEC pipeline so readers never
observe a parent without its children.
"""
import json
import logging
from typing import Optional, Type

import redis

from onboarding.db.redis_store import RedisStore
from onboarding.models.submission import (
    ChildDiff,
    ChildRow,
    DealRow,
    DishRow,
    FaqRow,
    MenuRow,
    PhotoRow,
    Submission,
    SubmissionBundle,
    SubmissionStatus,
    SubmissionSummary,
    utcnow,
)

logger = logging.getLogger(__name__)

SUBMISSION_KEY_FORMAT = "submission_v1:{}"
CHILD_KEY_FORMAT = "submission_{}_v1:{}"
SUBMISSIONS_INDEX_KEY = "submissions_index_v1"
ORPHAN_UPLOADS_KEY = "orphan_uploads_v1"

CHILD_MODELS: dict[str, Type[ChildRow]] = {
    "dishes": DishRow,
    "deals": DealRow,
    "photos": PhotoRow,
    "menus": MenuRow,
    "faqs": FaqRow,
}


class SubmissionNotFoundError(Exception):
    """Raised when a submission id does not exist."""


class SubmissionConflictError(Exception):
    """Raised when a submission changed since it was loaded for editing."""


def child_key(kind: str, submission_id: str) -> str:
    if kind not in CHILD_MODELS:
        raise ValueError(f"unknown child collection: {kind}")
    return CHILD_KEY_FORMAT.format(kind, submission_id)


class RedisSubmissionDAO:
    """Data Access Object for submissions and their child collections."""

    def __init__(self, store: RedisStore):
        """Initialize RedisSubmissionDAO.

        Args:
            store: RedisStore instance
        """
        self.store = store

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create_submission(self, bundle: SubmissionBundle) -> str:
        """Write a parent row and all of its children in one transaction.

        Args:
            bundle: Parent plus child rows, ids already assigned

        Returns:
            The submission id
        """
        submission = bundle.submission
        pipe = self.store.pipeline(transaction=True)
        pipe.set(SUBMISSION_KEY_FORMAT.format(submission.id), submission.model_dump_json())
        pipe.zadd(SUBMISSIONS_INDEX_KEY, {submission.id: submission.created_at.timestamp()})

        for kind in CHILD_MODELS:
            rows: list[ChildRow] = getattr(bundle, kind)
            if rows:
                pipe.hset(
                    child_key(kind, submission.id),
                    mapping={row.id: row.model_dump_json() for row in rows},
                )

        pipe.execute()
        logger.info(
            f"[RedisSubmissionDAO] Created submission {submission.id} "
            f"({len(bundle.dishes)} dishes, {len(bundle.deals)} deals, "
            f"{len(bundle.photos)} photos, {len(bundle.menus)} menus, {len(bundle.faqs)} faqs)"
        )
        return submission.id

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        """Retrieve a parent row by id, or None if not found."""
        json_str = self.store.get(SUBMISSION_KEY_FORMAT.format(submission_id))
        if json_str is None:
            return None
        return Submission.model_validate_json(json_str)

    def require_submission(self, submission_id: str) -> Submission:
        submission = self.get_submission(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(submission_id)
        return submission

    def get_children(self, submission_id: str, kind: str) -> list[ChildRow]:
        """Child rows of one collection ordered by display_order ascending."""
        model = CHILD_MODELS.get(kind)
        if model is None:
            raise ValueError(f"unknown child collection: {kind}")
        raw = self.store.hgetall(child_key(kind, submission_id))
        rows = [model.model_validate_json(value) for value in raw.values()]
        rows.sort(key=lambda r: (r.display_order, r.id))
        return rows

    def get_dishes(self, submission_id: str) -> list[DishRow]:
        return self.get_children(submission_id, "dishes")

    def get_deals(self, submission_id: str) -> list[DealRow]:
        return self.get_children(submission_id, "deals")

    def get_photos(self, submission_id: str) -> list[PhotoRow]:
        return self.get_children(submission_id, "photos")

    def get_menus(self, submission_id: str) -> list[MenuRow]:
        return self.get_children(submission_id, "menus")

    def get_faqs(self, submission_id: str) -> list[FaqRow]:
        return self.get_children(submission_id, "faqs")

    def get_bundle(self, submission_id: str) -> SubmissionBundle:
        """Parent and every child collection, freshly read."""
        submission = self.require_submission(submission_id)
        return SubmissionBundle(
            submission=submission,
            **{kind: self.get_children(submission_id, kind) for kind in CHILD_MODELS},
        )

    def list_submissions(self, limit: int = 50, offset: int = 0) -> list[SubmissionSummary]:
        """Newest submissions first."""
        ids = self.store.zrevrange(SUBMISSIONS_INDEX_KEY, offset, offset + limit - 1)
        summaries = []
        for submission_id in ids:
            submission = self.get_submission(submission_id)
            if submission is None:
                logger.warning(f"[RedisSubmissionDAO] Index references missing submission {submission_id}")
                continue
            summaries.append(
                SubmissionSummary(
                    id=submission.id,
                    restaurant_name=submission.restaurant_name,
                    email=submission.email,
                    status=submission.status,
                    created_at=submission.created_at,
                )
            )
        return summaries

    def count_submissions(self) -> int:
        return self.store.zcard(SUBMISSIONS_INDEX_KEY)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def apply_edit(
        self,
        submission_id: str,
        fields: dict,
        diffs: dict[str, ChildDiff],
        expected_version: int,
    ) -> Submission:
        """Write parent field changes and child diffs atomically.

        The parent key is WATCHed; if its version is not expected_version, or
        it changes before EXEC, nothing is written.

        Raises:
            SubmissionNotFoundError: If the submission does not exist
            SubmissionConflictError: If the submission was modified concurrently
        """
        key = SUBMISSION_KEY_FORMAT.format(submission_id)
        with self.store.pipeline(transaction=True) as pipe:
            try:
                pipe.watch(key)
                raw = pipe.get(key)
                if raw is None:
                    raise SubmissionNotFoundError(submission_id)
                current = Submission.model_validate_json(raw)
                if current.version != expected_version:
                    raise SubmissionConflictError(
                        f"submission {submission_id} is at version {current.version}, "
                        f"edit was based on {expected_version}"
                    )

                updated = current.model_copy(
                    update={**fields, "version": current.version + 1, "updated_at": utcnow()}
                )

                pipe.multi()
                pipe.set(key, updated.model_dump_json())
                for kind, diff in diffs.items():
                    ck = child_key(kind, submission_id)
                    if diff.deletes:
                        pipe.hdel(ck, *diff.deletes)
                    rows = [*diff.inserts, *diff.updates]
                    if rows:
                        pipe.hset(ck, mapping={row.id: row.model_dump_json() for row in rows})
                pipe.execute()
            except redis.WatchError as e:
                raise SubmissionConflictError(
                    f"submission {submission_id} changed during save"
                ) from e

        logger.info(f"[RedisSubmissionDAO] Saved edit of {submission_id} -> version {updated.version}")
        return updated

    def mark_live(self, submission_id: str) -> Submission:
        """Transition a submission to live. Already-live submissions are returned unchanged."""
        key = SUBMISSION_KEY_FORMAT.format(submission_id)
        with self.store.pipeline(transaction=True) as pipe:
            try:
                pipe.watch(key)
                raw = pipe.get(key)
                if raw is None:
                    raise SubmissionNotFoundError(submission_id)
                current = Submission.model_validate_json(raw)
                if current.status == SubmissionStatus.LIVE:
                    pipe.reset()
                    return current

                updated = current.model_copy(
                    update={
                        "status": SubmissionStatus.LIVE,
                        "version": current.version + 1,
                        "updated_at": utcnow(),
                    }
                )
                pipe.multi()
                pipe.set(key, updated.model_dump_json())
                pipe.execute()
            except redis.WatchError as e:
                raise SubmissionConflictError(
                    f"submission {submission_id} changed while marking live"
                ) from e

        logger.info(f"[RedisSubmissionDAO] Submission {submission_id} is live")
        return updated

    # -------------------------------------------------------------------------
    # Orphan uploads (files uploaded for a submission that was never written)
    # -------------------------------------------------------------------------

    def enqueue_orphans(self, objects: list[tuple[str, str]]) -> None:
        """Queue (bucket, key) pairs for deletion by the cleanup job."""
        if not objects:
            return
        self.store.rpush(
            ORPHAN_UPLOADS_KEY,
            *[json.dumps({"bucket": bucket, "key": key}) for bucket, key in objects],
        )
        logger.info(f"[RedisSubmissionDAO] Queued {len(objects)} orphan upload(s) for deletion")

    def pop_orphans(self, count: int) -> list[tuple[str, str]]:
        """Take up to count queued (bucket, key) pairs."""
        entries = []
        for raw in self.store.lpop(ORPHAN_UPLOADS_KEY, count):
            data = json.loads(raw)
            entries.append((data["bucket"], data["key"]))
        return entries
