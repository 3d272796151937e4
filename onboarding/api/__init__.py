"""Clients for external services (object storage, vision, e-mail)."""
from onboarding.api.s3_client import S3Client
from onboarding.api.openai_caption_client import OpenAICaptionClient, CaptionError
from onboarding.api.resend_client import ResendClient, NotificationError

__all__ = [
    "S3Client",
    "OpenAICaptionClient",
    "CaptionError",
    "ResendClient",
    "NotificationError",
]
