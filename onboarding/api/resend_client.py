"""Resend e-mail API client with async HTTP support."""
import base64
import logging
import time
from typing import Optional

import httpx

from onboarding.metrics import NOTIFICATION_EMAILS_TOTAL

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when the e-mail provider rejects or fails a send."""


class ResendClient:
    """Async HTTP client for the Resend /emails endpoint."""

    def __init__(self, api_key: str, base_url: str = "https://api.resend.com", timeout: float = 15.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.client = httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close the HTTP client and clean up resources."""
        await self.client.aclose()

    async def send_email(
        self,
        sender: str,
        to: list[str],
        subject: str,
        html: str,
        attachments: Optional[list[tuple[str, bytes]]] = None,
    ) -> Optional[str]:
        """Send an HTML e-mail.

        Args:
            sender: From header, e.g. "Submissions <onboarding@resend.dev>"
            to: Recipient addresses
            subject: Subject line
            html: HTML body
            attachments: (filename, content) pairs, base64 encoded on the wire

        Returns:
            Provider message id, if returned

        Raises:
            NotificationError: On HTTP or transport failure
        """
        payload = {
            "from": sender,
            "to": to,
            "subject": subject,
            "html": html,
        }
        if attachments:
            payload["attachments"] = [
                {"filename": name, "content": base64.b64encode(content).decode("ascii")}
                for name, content in attachments
            ]

        start_time = time.perf_counter()
        try:
            response = await self.client.post(
                f"{self.base_url}/emails",
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            NOTIFICATION_EMAILS_TOTAL.labels(result="error").inc()
            logger.error(
                f"[ResendClient] HTTP {e.response.status_code} sending '{subject}': {e.response.text}"
            )
            raise NotificationError(f"e-mail provider returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            NOTIFICATION_EMAILS_TOTAL.labels(result="error").inc()
            logger.error(f"[ResendClient] Request error sending '{subject}': {e}")
            raise NotificationError(str(e)) from e

        NOTIFICATION_EMAILS_TOTAL.labels(result="sent").inc()
        try:
            body = response.json()
        except ValueError:
            logger.warning(f"[ResendClient] Non-JSON response sending '{subject}': {response.text[:200]}")
            body = None
        message_id = body.get("id") if isinstance(body, dict) else None
        logger.info(
            f"[ResendClient] Sent '{subject}' to {len(to)} recipient(s) "
            f"in {time.perf_counter() - start_time:.2f}s (id={message_id})"
        )
        return message_id
