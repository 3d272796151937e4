"""Admin submission handler for HTTP requests."""
import logging

from onboarding.models.editing import EditableSubmission
from onboarding.models.submission import Submission
from onboarding.services.submission_editor import SubmissionEditor
from onboarding.services.submission_exporter import SubmissionExporter

logger = logging.getLogger(__name__)


class SubmissionHandler:
    """Handler for the admin dashboard: listing, editing, export, go-live."""

    def __init__(self, editor: SubmissionEditor, exporter: SubmissionExporter):
        self.editor = editor
        self.exporter = exporter

    def list_submissions(self, limit: int, offset: int) -> dict:
        items, total = self.editor.list_submissions(limit=limit, offset=offset)
        logger.info(f"[SubmissionHandler] Listing {len(items)} of {total} submissions (offset={offset})")
        return {"items": items, "total": total}

    def get_submission(self, submission_id: str) -> EditableSubmission:
        return self.editor.load(submission_id)

    def save_submission(self, submission_id: str, edited: EditableSubmission) -> EditableSubmission:
        if edited.id != submission_id:
            raise ValueError("submission id in body does not match the URL")
        return self.editor.save(edited)

    def export_submission(self, submission_id: str) -> dict:
        return self.exporter.export(submission_id)

    def export_submission_file(self, submission_id: str) -> tuple[str, bytes]:
        return self.exporter.export_json(submission_id)

    def mark_live(self, submission_id: str) -> Submission:
        logger.info(f"[SubmissionHandler] Marking {submission_id} live")
        return self.editor.mark_live(submission_id)
