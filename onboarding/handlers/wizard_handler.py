"""Wizard handler for HTTP requests."""
import logging
from typing import Any, Optional

from onboarding.models.draft import UploadedFile
from onboarding.services.wizard import WizardSessionRegistry

logger = logging.getLogger(__name__)


class WizardHandler:
    """Handler for wizard session requests. Every call returns the session state."""

    def __init__(self, registry: WizardSessionRegistry):
        """Initialize wizard handler.

        Args:
            registry: In-memory wizard session registry
        """
        self.registry = registry

    def create_session(self) -> dict:
        return self.registry.create().state()

    def get_session(self, session_id: str) -> dict:
        return self.registry.get(session_id).state()

    def update_section(self, session_id: str, section: str, value: Any) -> dict:
        session = self.registry.get(session_id)
        session.update_field(section, value)
        logger.debug(f"[WizardHandler] {session_id}: updated {section}")
        return session.state()

    def upload_file(
        self,
        session_id: str,
        field_path: str,
        filename: str,
        content_type: Optional[str],
        data: bytes,
    ) -> dict:
        session = self.registry.get(session_id)
        session.attach_file(
            field_path,
            UploadedFile(
                filename=filename or "upload",
                content_type=content_type or "application/octet-stream",
                data=data,
            ),
        )
        logger.info(f"[WizardHandler] {session_id}: attached {filename} ({len(data)} bytes) at {field_path}")
        return session.state()

    def remove_file(self, session_id: str, field_path: str) -> dict:
        session = self.registry.get(session_id)
        session.remove_file(field_path)
        return session.state()

    async def next_step(self, session_id: str) -> dict:
        """Advance; on the last step this submits.

        Returns:
            Session state plus "submission_id" (None unless this call submitted)
        """
        session = self.registry.get(session_id)
        submission_id = await session.next()
        return {**session.state(), "submission_id": submission_id}

    def previous_step(self, session_id: str) -> dict:
        session = self.registry.get(session_id)
        session.back()
        return session.state()

    def go_to_step(self, session_id: str, step: str) -> dict:
        session = self.registry.get(session_id)
        session.go_to(step)
        return session.state()
