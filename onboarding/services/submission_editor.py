"""Admin editing of persisted submissions."""
import logging
from typing import Optional, Type

from onboarding.dao.redis_submission_dao import (
    RedisSubmissionDAO,
    SubmissionConflictError,
)
from onboarding.metrics import SUBMISSION_EDITS_TOTAL, SUBMISSIONS_MARKED_LIVE
from onboarding.models.editing import EditableDeal, EditableDish, EditableSubmission
from onboarding.models.submission import (
    DISPLAY_ORDER_START,
    EDITABLE_SUBMISSION_FIELDS,
    ChildDiff,
    ChildRow,
    DealRow,
    DishRow,
    Submission,
    SubmissionStatus,
    SubmissionSummary,
)

logger = logging.getLogger(__name__)


class SubmissionEditor:
    """Loads submissions into an edit buffer and saves buffers back."""

    def __init__(self, submission_dao: RedisSubmissionDAO):
        """Initialize SubmissionEditor.

        Args:
            submission_dao: DAO for submission reads and transactional writes
        """
        self.submission_dao = submission_dao

    def list_submissions(self, limit: int = 50, offset: int = 0) -> tuple[list[SubmissionSummary], int]:
        """Newest first, plus the total count for paging."""
        return (
            self.submission_dao.list_submissions(limit=limit, offset=offset),
            self.submission_dao.count_submissions(),
        )

    def load(self, submission_id: str) -> EditableSubmission:
        """Read a submission and its dishes, deals and photos in display order.

        Raises:
            SubmissionNotFoundError: If the id does not exist
        """
        submission = self.submission_dao.require_submission(submission_id)
        return EditableSubmission.from_records(
            submission,
            self.submission_dao.get_dishes(submission_id),
            self.submission_dao.get_deals(submission_id),
            self.submission_dao.get_photos(submission_id),
        )

    def save(self, edited: EditableSubmission) -> EditableSubmission:
        """Write an edit buffer back.

        All editable parent fields are written. Dishes and deals are diffed
        against the stored rows by id: unknown or missing ids are inserted,
        changed rows updated and rows absent from the buffer deleted. Blank
        entries are dropped and display order is renumbered from 1. Photos
        are read-only here.

        Args:
            edited: Buffer previously returned by load(), possibly modified

        Returns:
            The freshly reloaded submission

        Raises:
            SubmissionNotFoundError: If the submission no longer exists
            SubmissionConflictError: If it changed since the buffer was loaded
        """
        submission_id = edited.id
        fields = {name: getattr(edited, name) for name in EDITABLE_SUBMISSION_FIELDS}

        diffs = {
            "dishes": self._diff(
                submission_id,
                self.submission_dao.get_dishes(submission_id),
                [d for d in edited.dishes if not d.is_blank()],
                DishRow,
                ("name", "description", "image_url"),
            ),
            "deals": self._diff(
                submission_id,
                self.submission_dao.get_deals(submission_id),
                [d for d in edited.deals if not d.is_blank()],
                DealRow,
                ("title", "description", "image_url"),
            ),
        }

        try:
            self.submission_dao.apply_edit(submission_id, fields, diffs, expected_version=edited.version)
        except SubmissionConflictError:
            SUBMISSION_EDITS_TOTAL.labels(result="conflict").inc()
            logger.warning(f"[SubmissionEditor] Save of {submission_id} rejected: stale version {edited.version}")
            raise

        SUBMISSION_EDITS_TOTAL.labels(result="success").inc()
        logger.info(
            f"[SubmissionEditor] Saved {submission_id}: "
            + ", ".join(
                f"{kind} +{len(d.inserts)} ~{len(d.updates)} -{len(d.deletes)}" for kind, d in diffs.items()
            )
        )
        return self.load(submission_id)

    def mark_live(self, submission_id: str) -> Submission:
        """One-way submitted -> live transition.

        Raises:
            SubmissionNotFoundError: If the id does not exist
        """
        was_live = self.submission_dao.require_submission(submission_id).status == SubmissionStatus.LIVE
        submission = self.submission_dao.mark_live(submission_id)
        if not was_live:
            SUBMISSIONS_MARKED_LIVE.inc()
        return submission

    def _diff(
        self,
        submission_id: str,
        stored: list[ChildRow],
        edited: list[EditableDish] | list[EditableDeal],
        row_model: Type[ChildRow],
        content_fields: tuple[str, ...],
    ) -> ChildDiff:
        stored_by_id = {row.id: row for row in stored}
        diff = ChildDiff()
        kept: set[str] = set()

        for position, item in enumerate(edited):
            order = DISPLAY_ORDER_START + position
            values = {name: getattr(item, name) for name in content_fields}
            existing: Optional[ChildRow] = stored_by_id.get(item.id) if item.id else None

            # A duplicated id in the buffer is treated as a new row
            if existing is None or existing.id in kept:
                diff.inserts.append(row_model(submission_id=submission_id, display_order=order, **values))
                continue

            kept.add(existing.id)
            changed = existing.display_order != order or any(
                getattr(existing, name) != value for name, value in values.items()
            )
            if changed:
                diff.updates.append(existing.model_copy(update={**values, "display_order": order}))

        diff.deletes = [row_id for row_id in stored_by_id if row_id not in kept]
        return diff
