"""Operator e-mail sent after a submission is persisted."""
import html
import logging
from datetime import datetime

import pytz
import redis

from onboarding.api.resend_client import NotificationError, ResendClient
from onboarding.dao.redis_submission_dao import SubmissionNotFoundError
from onboarding.services.submission_exporter import SubmissionExporter

logger = logging.getLogger(__name__)

NOT_PROVIDED = "Not provided"


class NotificationService:
    """Sends the new-submission summary with the export attached.

    A failed notification never fails the submission: errors are logged and
    notify_submission() returns False.
    """

    def __init__(
        self,
        resend_client: ResendClient,
        exporter: SubmissionExporter,
        sender: str,
        recipients: list[str],
        admin_base_url: str,
        timezone: str = "America/Toronto",
    ):
        self.resend_client = resend_client
        self.exporter = exporter
        self.sender = sender
        self.recipients = recipients
        self.admin_base_url = admin_base_url.rstrip("/")
        self.tz = pytz.timezone(timezone)

    async def notify_submission(self, submission_id: str) -> bool:
        try:
            document = self.exporter.export(submission_id)
        except (SubmissionNotFoundError, redis.RedisError) as e:
            logger.error(f"[NotificationService] Could not load submission {submission_id}: {e}")
            return False

        filename, attachment = self.exporter.to_json_file(document)
        name = document["restaurant"]["name"] or "Unnamed restaurant"
        try:
            await self.resend_client.send_email(
                sender=self.sender,
                to=self.recipients,
                subject=f"New Restaurant Submission: {name}",
                html=self.render_html(document),
                attachments=[(filename, attachment)],
            )
        except NotificationError as e:
            logger.error(f"[NotificationService] Notification for {submission_id} not sent: {e}")
            return False

        logger.info(f"[NotificationService] Notified {len(self.recipients)} recipient(s) of {submission_id}")
        return True

    def render_html(self, document: dict) -> str:
        restaurant = document["restaurant"]
        submitted = self._local_time(restaurant["created_at"])
        admin_link = f"{self.admin_base_url}/submissions/{restaurant['id']}"

        rows = [
            ("Restaurant", restaurant["name"]),
            ("Address", restaurant["address"]),
            ("Email", restaurant["email"]),
            ("Phone", restaurant["phone"] or NOT_PROVIDED),
            ("Submitted", submitted.strftime("%B %d, %Y at %I:%M %p %Z")),
            ("Popular dishes", str(len(document["popular_dishes"]))),
            ("Deals", str(len(document["deals"]))),
            ("Photos", str(len(document["photos"]))),
        ]
        table = "".join(
            f"<tr><td><strong>{html.escape(label)}:</strong></td><td>{html.escape(value or '')}</td></tr>"
            for label, value in rows
        )
        return (
            "<h2>New Restaurant Submission</h2>"
            f"<table>{table}</table>"
            f'<p><a href="{html.escape(admin_link)}">Open in admin dashboard</a></p>'
            "<p>The full submission is attached as JSON.</p>"
        )

    def _local_time(self, value: str) -> datetime:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = pytz.utc.localize(parsed)
        return parsed.astimezone(self.tz)
