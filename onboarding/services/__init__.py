"""Services package."""
from onboarding.services.image_normalizer import ImageNormalizer
from onboarding.services.submission_persister import SubmissionPersister, SubmissionPersistError
from onboarding.services.wizard import (
    WizardSession,
    WizardSessionRegistry,
    WizardBusyError,
    WizardSessionNotFoundError,
    WizardFieldError,
)
from onboarding.services.submission_editor import SubmissionEditor
from onboarding.services.submission_exporter import SubmissionExporter
from onboarding.services.notification_service import NotificationService
from onboarding.services.orphan_cleanup_service import OrphanCleanupService
from onboarding.services.photo_batch_service import PhotoBatchService

__all__ = [
    "ImageNormalizer",
    "SubmissionPersister",
    "SubmissionPersistError",
    "WizardSession",
    "WizardSessionRegistry",
    "WizardBusyError",
    "WizardSessionNotFoundError",
    "WizardFieldError",
    "SubmissionEditor",
    "SubmissionExporter",
    "NotificationService",
    "OrphanCleanupService",
    "PhotoBatchService",
]
